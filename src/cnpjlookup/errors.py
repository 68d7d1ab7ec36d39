"""Exception hierarchy shared by the gateway, the provider adapter and the surfaces."""

from __future__ import annotations

GENERIC_FAILURE_MESSAGE = "Não foi possível consultar o CNPJ no momento. Tente novamente."


class CnpjLookupError(RuntimeError):
    """Base class for every failure raised by a CNPJ lookup."""

    user_message: str = GENERIC_FAILURE_MESSAGE


class InvalidIdentifierError(CnpjLookupError, ValueError):
    """The identifier failed local validation and never reached the provider."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return self.reason


class ProviderError(CnpjLookupError):
    """The provider could not deliver a record."""


class ProviderNetworkError(ProviderError):
    """Transport-level failure while talking to the provider."""


class ProviderUpstreamError(ProviderError):
    """The provider answered but signalled a failure."""

    def __init__(self, message: str, *, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class ThrottleTimeoutError(CnpjLookupError):
    """The throttle permit was not obtained within the configured timeout."""


__all__ = [
    "GENERIC_FAILURE_MESSAGE",
    "CnpjLookupError",
    "InvalidIdentifierError",
    "ProviderError",
    "ProviderNetworkError",
    "ProviderUpstreamError",
    "ThrottleTimeoutError",
]
