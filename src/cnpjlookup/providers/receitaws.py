"""ReceitaWS API provider implementation."""

from __future__ import annotations

import os
import re
from collections.abc import Sequence
from datetime import date, datetime
from typing import Any, cast

import requests
from requests import Response

from ..errors import ProviderNetworkError, ProviderUpstreamError
from ..identifier import normalize_and_validate
from ..masking import mask_cnpj, mask_email
from ..utils.logging_setup import setup_logger
from .base import (
    LookupResult,
    Provider,
    ProviderPayload,
    ProviderResponse,
    ProviderSignaledError,
)

_BASE_LOGGER = setup_logger()
LOGGER = _BASE_LOGGER.getChild("providers.receitaws")

DEFAULT_BASE_URL = "https://receitaws.com.br/v1/cnpj"
_DEFAULT_TIMEOUT = (5.0, 30.0)
_UNKNOWN_STATUS = "DESCONHECIDO"
_OPENING_DATE = re.compile(r"\d{2}/\d{2}/\d{4}")
_LOGGED_BODY_LIMIT = 500


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def parse_opening_date(value: str | None) -> date | None:
    """Parse ``dd/mm/yyyy``; any other format yields ``None``."""

    if not value or not _OPENING_DATE.fullmatch(value.strip()):
        return None
    try:
        return datetime.strptime(value.strip(), "%d/%m/%Y").date()
    except ValueError:
        return None


def _format_activity(entry: Any) -> str | None:
    if not isinstance(entry, dict):
        return None
    code = _clean(entry.get("code")) or ""
    text = _clean(entry.get("text")) or ""
    if not code and not text:
        return None
    return f"{code} - {text}"


def _activities(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    formatted = (_format_activity(entry) for entry in raw)
    return [item for item in formatted if item]


def decode_payload(payload: Any) -> ProviderResponse:
    """Tag a decoded provider body as data or as an in-payload error."""

    if not isinstance(payload, dict):
        return ProviderSignaledError("Resposta do provedor em formato inesperado")
    if str(payload.get("status") or "").upper() == "ERROR":
        message = _clean(payload.get("message")) or "Erro desconhecido"
        return ProviderSignaledError(message)
    return ProviderPayload(cast(dict[str, Any], payload))


def build_result(cnpj: str, data: dict[str, Any], raw_json: str) -> LookupResult:
    """Map the ReceitaWS schema onto :class:`LookupResult`."""

    primary = _activities(data.get("atividade_principal"))
    secondary = _activities(data.get("atividades_secundarias"))

    return LookupResult(
        cnpj=cnpj,
        legal_name=_clean(data.get("nome")) or "",
        trade_name=_clean(data.get("fantasia")),
        status=_clean(data.get("situacao")) or _UNKNOWN_STATUS,
        opening_date=parse_opening_date(_clean(data.get("abertura"))),
        primary_activity=primary[0] if primary else None,
        secondary_activities="; ".join(secondary) if secondary else None,
        street=_clean(data.get("logradouro")),
        number=_clean(data.get("numero")),
        complement=_clean(data.get("complemento")),
        district=_clean(data.get("bairro")),
        municipality=_clean(data.get("municipio")),
        state=_clean(data.get("uf")),
        postal_code=_clean(data.get("cep")),
        phone=_clean(data.get("telefone")),
        email=_clean(data.get("email")),
        company_type=_clean(data.get("tipo")),
        company_size=_clean(data.get("porte")),
        legal_nature=_clean(data.get("natureza_juridica")),
        raw_json=raw_json,
    )


class ReceitaWsProvider(Provider):
    """Provider that retrieves registry data from the ReceitaWS API."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        *,
        timeout: Sequence[float] | None = None,
    ) -> None:
        self.base_url = (
            base_url or os.getenv("CNPJ_LOOKUP_BASE_URL") or DEFAULT_BASE_URL
        ).rstrip("/")
        self.api_key = api_key or os.getenv("CNPJ_LOOKUP_API_KEY") or None

        self._headers = {"Accept": "application/json"}
        if self.api_key:
            self._headers["Authorization"] = f"Bearer {self.api_key}"

        if timeout is None:
            self._timeout = _DEFAULT_TIMEOUT
        elif len(timeout) == 1:
            self._timeout = (float(timeout[0]), _DEFAULT_TIMEOUT[1])
        else:
            connect, read = float(timeout[0]), float(timeout[1])
            self._timeout = (connect, read)

    def _perform_request(self, cnpj: str) -> Response:
        url = f"{self.base_url}/{cnpj}"
        try:
            return requests.get(url, headers=self._headers, timeout=self._timeout)
        except requests.RequestException as exc:
            # the exception text carries the request URL
            detail = str(exc).replace(cnpj, mask_cnpj(cnpj))
            LOGGER.error("Falha de rede ao consultar CNPJ %s: %s", mask_cnpj(cnpj), detail)
            raise ProviderNetworkError(f"Falha de rede ao consultar o provedor: {detail}") from exc

    def fetch(self, cnpj: str) -> LookupResult:
        cnpj = normalize_and_validate(cnpj)
        LOGGER.info("Consultando CNPJ %s na ReceitaWS", mask_cnpj(cnpj))

        response = self._perform_request(cnpj)
        body = response.text or ""

        if not 200 <= response.status_code < 300:
            LOGGER.warning(
                "Erro %s da ReceitaWS para CNPJ %s: %s",
                response.status_code,
                mask_cnpj(cnpj),
                body[:_LOGGED_BODY_LIMIT].replace(cnpj, mask_cnpj(cnpj)),
            )
            raise ProviderUpstreamError(
                f"Erro na consulta: {response.status_code}",
                status=response.status_code,
                body=body,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            LOGGER.warning("Resposta JSON inválida para CNPJ %s", mask_cnpj(cnpj))
            raise ProviderUpstreamError(
                "Resposta inválida do provedor",
                status=response.status_code,
                body=body,
            ) from exc

        decoded = decode_payload(payload)
        if isinstance(decoded, ProviderSignaledError):
            LOGGER.warning(
                "ReceitaWS sinalizou erro para CNPJ %s: %s",
                mask_cnpj(cnpj),
                decoded.message,
            )
            raise ProviderUpstreamError(decoded.message, status=response.status_code, body=body)

        result = build_result(cnpj, decoded.data, body)
        LOGGER.debug(
            "CNPJ %s resolvido: situacao=%s email=%s",
            mask_cnpj(cnpj),
            result.status,
            mask_email(result.email),
        )
        return result
