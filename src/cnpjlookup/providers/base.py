"""Provider base interfaces and shared types."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Protocol


@dataclass(frozen=True)
class LookupResult:
    """Canonical registry record for one CNPJ."""

    cnpj: str
    legal_name: str
    status: str
    trade_name: str | None = None
    opening_date: date | None = None
    primary_activity: str | None = None
    secondary_activities: str | None = None
    street: str | None = None
    number: str | None = None
    complement: str | None = None
    district: str | None = None
    municipality: str | None = None
    state: str | None = None
    postal_code: str | None = None
    phone: str | None = None
    email: str | None = None
    company_type: str | None = None
    company_size: str | None = None
    legal_nature: str | None = None
    raw_json: str = ""

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["opening_date"] = self.opening_date.isoformat() if self.opening_date else None
        return data


@dataclass(frozen=True)
class ProviderPayload:
    """Decoded provider body that carries registry data."""

    data: dict[str, Any]


@dataclass(frozen=True)
class ProviderSignaledError:
    """Decoded provider body that reports an error despite an HTTP success code."""

    message: str


ProviderResponse = ProviderPayload | ProviderSignaledError


class Provider(Protocol):
    """Protocol defining a registry data provider."""

    def fetch(self, cnpj: str) -> LookupResult:
        """Retrieve the registry record for a normalised CNPJ."""

        ...
