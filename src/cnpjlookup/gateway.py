"""Public entry point: validation, cache, throttle and provider in one call."""

from __future__ import annotations

from dataclasses import dataclass

from .cache import ResultCache
from .config import Settings
from .errors import CnpjLookupError, InvalidIdentifierError
from .identifier import normalize, normalize_and_validate
from .masking import mask_cnpj
from .providers.base import LookupResult, Provider
from .providers.receitaws import ReceitaWsProvider
from .throttle import ThrottleGate
from .utils.logging_setup import setup_logger

_BASE_LOGGER = setup_logger()
LOGGER = _BASE_LOGGER.getChild("gateway")


@dataclass(frozen=True)
class LookupOutcome:
    result: LookupResult
    cached: bool


class CnpjLookupGateway:
    """Cache-aside lookup with a process-wide throttle around provider calls.

    Concurrent misses for the same CNPJ are not merged: each caller waits for
    the gate, calls the provider and overwrites the cache entry.
    """

    def __init__(
        self,
        provider: Provider,
        cache: ResultCache | None = None,
        throttle: ThrottleGate | None = None,
        *,
        acquire_timeout: float | None = None,
    ) -> None:
        self.provider = provider
        self.cache = cache if cache is not None else ResultCache()
        self.throttle = throttle if throttle is not None else ThrottleGate()
        self.acquire_timeout = acquire_timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> CnpjLookupGateway:
        provider = ReceitaWsProvider(
            base_url=settings.base_url,
            api_key=settings.api_key,
            timeout=settings.timeout,
        )
        return cls(
            provider,
            cache=ResultCache(ttl=settings.cache_ttl, max_entries=settings.cache_max_entries),
            throttle=ThrottleGate(spacing=settings.throttle_spacing),
            acquire_timeout=settings.acquire_timeout,
        )

    def lookup(self, raw: str) -> LookupOutcome:
        try:
            cnpj = normalize_and_validate(raw)
        except InvalidIdentifierError as exc:
            LOGGER.warning("CNPJ inválido %s: %s", mask_cnpj(normalize(raw)), exc.reason)
            raise

        cached = self.cache.get(cnpj)
        if cached is not None:
            LOGGER.info("CNPJ %s retornado do cache", mask_cnpj(cnpj))
            return LookupOutcome(result=cached, cached=True)

        try:
            with self.throttle.permit(timeout=self.acquire_timeout):
                result = self.provider.fetch(cnpj)
                self.cache.put(cnpj, result)
        except CnpjLookupError as exc:
            LOGGER.error("Erro ao consultar CNPJ %s: %s", mask_cnpj(cnpj), exc)
            raise

        return LookupOutcome(result=result, cached=False)


__all__ = ["CnpjLookupGateway", "LookupOutcome"]
