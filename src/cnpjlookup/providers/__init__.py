"""Implementações de provedores para ``cnpjlookup``."""

from .base import (
    LookupResult,
    Provider,
    ProviderPayload,
    ProviderResponse,
    ProviderSignaledError,
)
from .receitaws import ReceitaWsProvider

__all__ = [
    "LookupResult",
    "Provider",
    "ProviderPayload",
    "ProviderResponse",
    "ProviderSignaledError",
    "ReceitaWsProvider",
]
