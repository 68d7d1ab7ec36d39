from __future__ import annotations

import json
from pathlib import Path

import pytest

from cnpjlookup import cli
from cnpjlookup.config import Settings, load_settings
from cnpjlookup.errors import InvalidIdentifierError, ProviderNetworkError
from cnpjlookup.gateway import LookupOutcome
from cnpjlookup.providers.base import LookupResult


class DummyGateway:
    calls: list[str] = []

    @classmethod
    def from_settings(cls, settings: Settings) -> DummyGateway:
        return cls()

    def lookup(self, raw: str) -> LookupOutcome:
        self.calls.append(raw)
        if raw == "invalid":
            raise InvalidIdentifierError("CNPJ inválido: deve conter 14 dígitos")
        if raw == "offline":
            raise ProviderNetworkError("down")
        result = LookupResult(cnpj="11222333000181", legal_name="EXEMPLO LTDA", status="ATIVA")
        return LookupOutcome(result=result, cached=False)


@pytest.fixture(autouse=True)
def dummy_gateway(monkeypatch: pytest.MonkeyPatch) -> type[DummyGateway]:
    DummyGateway.calls = []
    monkeypatch.setattr(cli, "CnpjLookupGateway", DummyGateway)
    monkeypatch.setattr(cli, "load_settings", lambda path=None: Settings())
    return DummyGateway


def test_single_lookup_prints_json(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main(["--cnpj", "11.222.333/0001-81"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["cached"] is False
    assert payload["data"]["legal_name"] == "EXEMPLO LTDA"


def test_single_lookup_invalid_returns_1() -> None:
    assert cli.main(["--cnpj", "invalid"]) == 1


def test_single_lookup_provider_failure_returns_3() -> None:
    assert cli.main(["--cnpj", "offline"]) == 3


def test_batch_mode_skips_writes_on_dry_run(monkeypatch: pytest.MonkeyPatch) -> None:
    rows = [
        {"index": 2, "cnpj": "11222333000181"},
        {"index": 3, "cnpj": "invalid"},
        {"index": 4, "cnpj": "offline"},
    ]
    written: list[int] = []

    monkeypatch.setattr(cli.excel_io, "iter_rows", lambda **_: iter(rows))
    monkeypatch.setattr(
        cli.excel_io, "write_result", lambda **kwargs: written.append(kwargs["row_index"])
    )

    exit_code = cli.main(["--excel", "leads.xlsx", "--sheet", "Leads", "--dry-run"])

    assert exit_code == 4
    assert DummyGateway.calls == ["11222333000181", "invalid", "offline"]
    assert written == []


def test_batch_mode_writes_results_and_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    rows = [
        {"index": 2, "cnpj": "11222333000181"},
        {"index": 3, "cnpj": "invalid"},
    ]
    results: list[int] = []
    errors: list[tuple[int, str, str]] = []
    saved: list[str] = []

    monkeypatch.setattr(cli.excel_io, "iter_rows", lambda **_: iter(rows))
    monkeypatch.setattr(
        cli.excel_io, "write_result", lambda **kwargs: results.append(kwargs["row_index"])
    )
    monkeypatch.setattr(
        cli.excel_io,
        "write_error",
        lambda path, sheet, row, column, message: errors.append((row, column, message)),
    )
    monkeypatch.setattr(cli.excel_io, "save", saved.append)

    exit_code = cli.main(["--excel", "leads.xlsx", "--sheet", "Leads", "--error-col", "z"])

    assert exit_code == 4
    assert results == [2]
    assert errors == [(3, "Z", "CNPJ inválido: deve conter 14 dígitos")]
    assert saved == ["leads.xlsx"]


def test_batch_mode_requires_sheet() -> None:
    assert cli.main(["--excel", "leads.xlsx"]) == 2


def test_batch_with_only_valid_rows_returns_0(monkeypatch: pytest.MonkeyPatch) -> None:
    rows = [{"index": 2, "cnpj": "11222333000181"}]
    monkeypatch.setattr(cli.excel_io, "iter_rows", lambda **_: iter(rows))
    monkeypatch.setattr(cli.excel_io, "write_result", lambda **_: None)
    monkeypatch.setattr(cli.excel_io, "save", lambda path: None)

    assert cli.main(["--excel", "leads.xlsx", "--sheet", "Leads"]) == 0


def test_batch_with_only_invalid_rows_returns_4(monkeypatch: pytest.MonkeyPatch) -> None:
    rows = [{"index": 2, "cnpj": "invalid"}, {"index": 3, "cnpj": "invalid"}]
    monkeypatch.setattr(cli.excel_io, "iter_rows", lambda **_: iter(rows))
    monkeypatch.setattr(cli.excel_io, "write_error", lambda *args: None)
    monkeypatch.setattr(cli.excel_io, "save", lambda path: None)

    assert cli.main(["--excel", "leads.xlsx", "--sheet", "Leads"]) == 4


def test_out_of_range_setting_returns_2(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "load_settings", load_settings)
    monkeypatch.setenv("CNPJ_LOOKUP_CACHE_TTL", "0")

    assert cli.main(["--cnpj", "11.222.333/0001-81"]) == 2
    assert DummyGateway.calls == []


def test_serve_with_out_of_range_setting_returns_2(monkeypatch: pytest.MonkeyPatch) -> None:
    started: list[Settings] = []
    monkeypatch.setattr(cli, "load_settings", load_settings)
    monkeypatch.setattr("cnpjlookup.api.run", started.append)
    monkeypatch.setenv("CNPJ_LOOKUP_THROTTLE_SPACING", "-1")

    assert cli.main(["--serve"]) == 2
    assert started == []


def test_gateway_construction_error_returns_2(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_from_settings(settings: Settings) -> DummyGateway:
        raise ValueError("spacing não pode ser negativo")

    monkeypatch.setattr(DummyGateway, "from_settings", staticmethod(broken_from_settings))

    assert cli.main(["--cnpj", "11.222.333/0001-81"]) == 2


def test_mapping_yaml_overrides_and_drops_columns(tmp_path: Path) -> None:
    mapping_file = tmp_path / "mapping.yaml"
    mapping_file.write_text("legal_name: z\nemail: null\n", encoding="utf-8")

    mapping = cli._load_mapping(str(mapping_file))

    assert mapping["legal_name"] == "Z"
    assert "email" not in mapping
    assert mapping["status"] == cli.DEFAULT_MAPPING["status"]


def test_parse_args_defaults() -> None:
    args = cli._parse_args(["--excel", "leads.xlsx", "--sheet", "Leads"])

    assert args.cnpj_col == "A"
    assert args.start == 2
    assert args.dry_run is False


def test_modes_are_mutually_exclusive() -> None:
    with pytest.raises(SystemExit):
        cli._parse_args(["--cnpj", "1", "--serve"])
