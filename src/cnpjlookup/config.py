"""Runtime settings: defaults, optional YAML file, ``.env`` and environment."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .cache import DEFAULT_MAX_ENTRIES, DEFAULT_TTL_SECONDS
from .providers.receitaws import DEFAULT_BASE_URL
from .throttle import DEFAULT_SPACING_SECONDS

ENV_PREFIX = "CNPJ_LOOKUP_"


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    api_key: str | None = None
    cache_ttl: float = DEFAULT_TTL_SECONDS
    cache_max_entries: int = DEFAULT_MAX_ENTRIES
    throttle_spacing: float = DEFAULT_SPACING_SECONDS
    connect_timeout: float = 5.0
    read_timeout: float = 30.0
    acquire_timeout: float | None = None
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def timeout(self) -> tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)


def _optional_float(value: str) -> float | None:
    if value.strip().lower() in {"", "none", "null"}:
        return None
    return float(value)


def _optional_str(value: str) -> str | None:
    return value.strip() or None


_CONVERTERS: dict[str, Callable[[str], Any]] = {
    "base_url": str.strip,
    "api_key": _optional_str,
    "cache_ttl": float,
    "cache_max_entries": int,
    "throttle_spacing": float,
    "connect_timeout": float,
    "read_timeout": float,
    "acquire_timeout": _optional_float,
    "host": str.strip,
    "port": int,
}


_NULLABLE = {"api_key", "acquire_timeout"}


def _coerce(key: str, value: Any) -> Any:
    if value is None:
        if key in _NULLABLE:
            return None
        raise ValueError(f"Valor inválido para {key}: {value!r}")
    try:
        return _CONVERTERS[key](str(value))
    except ValueError as exc:
        raise ValueError(f"Valor inválido para {key}: {value!r}") from exc


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError("YAML de configuração deve conter um dicionário")

    known = {field.name for field in fields(Settings)}
    values: dict[str, Any] = {}
    for key, value in data.items():
        str_key = str(key).strip().lower()
        if str_key not in known:
            raise ValueError(f"Chave de configuração desconhecida: {key}")
        values[str_key] = _coerce(str_key, value)
    return values


def _validate(settings: Settings) -> Settings:
    if settings.cache_ttl <= 0:
        raise ValueError(f"cache_ttl deve ser positivo: {settings.cache_ttl!r}")
    if settings.cache_max_entries < 1:
        raise ValueError(
            f"cache_max_entries deve ser no mínimo 1: {settings.cache_max_entries!r}"
        )
    if settings.throttle_spacing < 0:
        raise ValueError(
            f"throttle_spacing não pode ser negativo: {settings.throttle_spacing!r}"
        )
    for name in ("connect_timeout", "read_timeout"):
        value = getattr(settings, name)
        if value <= 0:
            raise ValueError(f"{name} deve ser positivo: {value!r}")
    if settings.acquire_timeout is not None and settings.acquire_timeout < 0:
        raise ValueError(
            f"acquire_timeout não pode ser negativo: {settings.acquire_timeout!r}"
        )
    if not 1 <= settings.port <= 65535:
        raise ValueError(f"port fora do intervalo 1-65535: {settings.port!r}")
    return settings


def load_settings(
    path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Build :class:`Settings`; environment variables win over the YAML file.

    Raises :class:`ValueError` for unparsable or out-of-range values.
    """

    if env is None:
        dotenv_path = Path(".env")
        if dotenv_path.exists():
            load_dotenv(dotenv_path=dotenv_path)
        env = os.environ

    settings = Settings()
    config_path = path or env.get(f"{ENV_PREFIX}CONFIG")
    if config_path:
        settings = replace(settings, **_load_yaml(Path(config_path)))

    overrides: dict[str, Any] = {}
    for field in fields(Settings):
        raw = env.get(f"{ENV_PREFIX}{field.name.upper()}")
        if raw is not None:
            overrides[field.name] = _coerce(field.name, raw)
    if overrides:
        settings = replace(settings, **overrides)
    return _validate(settings)


__all__ = ["ENV_PREFIX", "Settings", "load_settings"]
