"""Time-bounded cache-aside store for lookup results."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

from .masking import mask_cnpj
from .providers.base import LookupResult
from .utils.logging_setup import setup_logger

_BASE_LOGGER = setup_logger()
LOGGER = _BASE_LOGGER.getChild("cache")

DEFAULT_TTL_SECONDS = 600.0
DEFAULT_MAX_ENTRIES = 1024


@dataclass(frozen=True)
class CacheEntry:
    cnpj: str
    result: LookupResult
    inserted_at: float

    def is_fresh(self, now: float, ttl: float) -> bool:
        return now - self.inserted_at < ttl


class ResultCache:
    """Thread-safe in-process cache keyed by normalised CNPJ.

    Entries are valid for ``ttl`` seconds after insertion. The store is also
    bounded to ``max_entries``; when full, the oldest insertion is evicted
    first.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl <= 0:
            raise ValueError("ttl deve ser positivo")
        if max_entries < 1:
            raise ValueError("max_entries deve ser no mínimo 1")
        self.ttl = float(ttl)
        self.max_entries = int(max_entries)
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, cnpj: str) -> LookupResult | None:
        """Return the cached result for *cnpj*, or ``None`` on miss or expiry."""

        with self._lock:
            entry = self._entries.get(cnpj)
            if entry is None:
                return None
            if not entry.is_fresh(self._clock(), self.ttl):
                del self._entries[cnpj]
                LOGGER.debug("Cache expirado para CNPJ %s", mask_cnpj(cnpj))
                return None
            return entry.result

    def put(self, cnpj: str, result: LookupResult) -> None:
        """Insert or overwrite *cnpj* with the current timestamp."""

        with self._lock:
            now = self._clock()
            self._entries.pop(cnpj, None)
            self._entries[cnpj] = CacheEntry(cnpj=cnpj, result=result, inserted_at=now)
            self._purge_expired(now)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                LOGGER.debug("Cache cheio, removendo CNPJ %s", mask_cnpj(evicted))

    def _purge_expired(self, now: float) -> None:
        # insertion order equals age order, so stop at the first fresh entry
        while self._entries:
            oldest = next(iter(self._entries.values()))
            if oldest.is_fresh(now, self.ttl):
                break
            self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, cnpj: object) -> bool:
        return isinstance(cnpj, str) and self.get(cnpj) is not None


__all__ = ["CacheEntry", "DEFAULT_MAX_ENTRIES", "DEFAULT_TTL_SECONDS", "ResultCache"]
