"""Command line entry point for CNPJ lookups (single, batch workbook, or API server)."""

from __future__ import annotations

import argparse
import json
import logging
import time
from collections.abc import Mapping, MutableMapping
from pathlib import Path

import yaml

from . import excel_io
from .config import Settings, load_settings
from .errors import CnpjLookupError, InvalidIdentifierError
from .gateway import CnpjLookupGateway
from .utils.logging_setup import setup_logger

logger = logging.getLogger(__name__)

DEFAULT_MAPPING: dict[str, str] = {
    "legal_name": "B",
    "trade_name": "C",
    "status": "D",
    "opening_date": "E",
    "primary_activity": "F",
    "street": "G",
    "number": "H",
    "district": "I",
    "municipality": "J",
    "state": "K",
    "postal_code": "L",
    "phone": "M",
    "email": "N",
}


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Consulta de dados cadastrais por CNPJ")
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--cnpj", help="Consulta um único CNPJ e imprime o resultado em JSON")
    mode.add_argument("--excel", help="Caminho da planilha com CNPJs")
    mode.add_argument("--serve", action="store_true", help="Inicia a API HTTP")
    parser.add_argument("--sheet", help="Nome da aba (obrigatório com --excel)")
    parser.add_argument(
        "--start", type=int, default=2, help="Linha inicial (1-based). Padrão: 2."
    )
    parser.add_argument("--end", type=int, help="Linha final (1-based, inclusiva)")
    parser.add_argument("--cnpj-col", default="A", help="Coluna com o CNPJ (padrão: A)")
    parser.add_argument(
        "--error-col", default="O", help="Coluna para mensagens de erro (padrão: O)"
    )
    parser.add_argument(
        "--mapping-yaml",
        help="YAML com o mapeamento entre campos do resultado e colunas",
    )
    parser.add_argument("--config", help="Arquivo YAML de configuração")
    parser.add_argument(
        "--verbose", action="store_true", help="Ativa a saída de log detalhada"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Apenas consulta, sem gravar na planilha",
    )
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    setup_logger(level)


def _validate_column(column: str | None) -> str | None:
    if column is None:
        return None
    column = column.strip().upper()
    if not column:
        return None
    if not column.isalpha():
        raise ValueError(f"Coluna inválida: {column}")
    return column


def _load_mapping(path: str | None) -> dict[str, str]:
    mapping: MutableMapping[str, str] = dict(DEFAULT_MAPPING)
    if not path:
        return dict(mapping)

    mapping_path = Path(path)
    if not mapping_path.exists():
        raise FileNotFoundError(f"Arquivo de mapeamento não encontrado: {mapping_path}")

    data = yaml.safe_load(mapping_path.read_text(encoding="utf-8"))
    if data is None:
        return dict(mapping)
    if not isinstance(data, Mapping):
        raise ValueError("YAML de mapeamento deve conter um dicionário")

    for key, value in data.items():
        if value is None:
            mapping.pop(str(key), None)
            continue
        str_value = _validate_column(str(value))
        if str_value is None:
            continue
        mapping[str(key)] = str_value

    return dict(mapping)


def _lookup_single(gateway: CnpjLookupGateway, cnpj: str) -> int:
    try:
        outcome = gateway.lookup(cnpj)
    except InvalidIdentifierError as exc:
        logger.error("%s", exc.user_message)
        return 1
    except CnpjLookupError as exc:
        logger.error("Consulta falhou: %s", exc)
        return 3

    payload = {"cached": outcome.cached, "data": outcome.result.as_dict()}
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


def _lookup_workbook(
    gateway: CnpjLookupGateway, args: argparse.Namespace, mapping: Mapping[str, str]
) -> int:
    try:
        cnpj_column = _validate_column(args.cnpj_col)
        error_column = _validate_column(args.error_col)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2
    if not cnpj_column:
        logger.error("Coluna de CNPJ não pode ser vazia")
        return 2

    processed = 0
    hits = 0
    invalid = 0
    errors = 0
    start_time = time.perf_counter()

    rows = excel_io.iter_rows(
        excel_path=args.excel,
        sheet=args.sheet,
        start=args.start,
        end=args.end,
        cnpj_col=cnpj_column,
    )

    for row in rows:
        processed += 1
        try:
            outcome = gateway.lookup(row["cnpj"])
        except InvalidIdentifierError as exc:
            invalid += 1
            message = exc.user_message
        except CnpjLookupError as exc:
            errors += 1
            message = exc.user_message
        else:
            hits += 1
            if not args.dry_run:
                excel_io.write_result(
                    excel_path=args.excel,
                    sheet=args.sheet,
                    row_index=row["index"],
                    result=outcome.result,
                    mapping=mapping,
                )
            continue

        if not args.dry_run and error_column:
            excel_io.write_error(args.excel, args.sheet, row["index"], error_column, message)

    if not args.dry_run:
        excel_io.save(args.excel)

    duration = time.perf_counter() - start_time
    logger.info(
        "Processamento concluído: processed=%s hits=%s invalid=%s errors=%s duration=%.2fs",
        processed,
        hits,
        invalid,
        errors,
        duration,
    )

    if errors or invalid:
        return 4
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.verbose)

    try:
        settings: Settings = load_settings(args.config)
    except (OSError, ValueError) as exc:
        logger.error("Configuração inválida: %s", exc)
        return 2

    if args.serve:
        from .api import run

        run(settings)
        return 0

    try:
        gateway = CnpjLookupGateway.from_settings(settings)
    except ValueError as exc:
        logger.error("Configuração inválida: %s", exc)
        return 2

    if args.cnpj:
        return _lookup_single(gateway, args.cnpj)

    if not args.sheet:
        logger.error("--sheet é obrigatório com --excel")
        return 2

    try:
        mapping = _load_mapping(args.mapping_yaml)
    except (OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 2

    return _lookup_workbook(gateway, args, mapping)


if __name__ == "__main__":
    raise SystemExit(main())
