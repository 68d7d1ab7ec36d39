"""Exportações centrais do pacote ``cnpjlookup``."""

from .cache import ResultCache
from .config import Settings, load_settings
from .errors import (
    CnpjLookupError,
    InvalidIdentifierError,
    ProviderError,
    ProviderNetworkError,
    ProviderUpstreamError,
    ThrottleTimeoutError,
)
from .gateway import CnpjLookupGateway, LookupOutcome
from .identifier import check_digits, is_valid, normalize, normalize_and_validate, validate
from .masking import mask_cnpj, mask_email
from .providers import LookupResult, Provider, ReceitaWsProvider
from .throttle import ThrottleGate
from .utils.logging_setup import setup_logger

__all__ = [
    "CnpjLookupError",
    "CnpjLookupGateway",
    "InvalidIdentifierError",
    "LookupOutcome",
    "LookupResult",
    "Provider",
    "ProviderError",
    "ProviderNetworkError",
    "ProviderUpstreamError",
    "ReceitaWsProvider",
    "ResultCache",
    "Settings",
    "ThrottleGate",
    "ThrottleTimeoutError",
    "check_digits",
    "is_valid",
    "load_settings",
    "mask_cnpj",
    "mask_email",
    "normalize",
    "normalize_and_validate",
    "setup_logger",
    "validate",
]
