"""Process-wide single-slot gate that spaces outbound provider calls.

One instance is built at startup and shared by reference between all callers.
At most one holder exists at any time. ``release`` does not free the permit
until ``spacing`` seconds have passed since ``release`` was called, so every
provider call is followed by at least ``spacing`` seconds of idle time before
the next holder proceeds, however many callers are queued.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from .errors import ThrottleTimeoutError
from .utils.logging_setup import setup_logger

_BASE_LOGGER = setup_logger()
LOGGER = _BASE_LOGGER.getChild("throttle")

DEFAULT_SPACING_SECONDS = 1.0


class ThrottleGate:
    """Binary permit plus enforced minimum interval between holders."""

    def __init__(
        self,
        spacing: float = DEFAULT_SPACING_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleeper: Callable[[float], None] = time.sleep,
    ) -> None:
        if spacing < 0:
            raise ValueError("spacing não pode ser negativo")
        self.spacing = float(spacing)
        self._clock = clock
        self._sleeper = sleeper
        self._condition = threading.Condition(threading.Lock())
        self._held = False
        self._last_release: float | None = None

    @property
    def held(self) -> bool:
        with self._condition:
            return self._held

    @property
    def last_release(self) -> float | None:
        with self._condition:
            return self._last_release

    def acquire(self, timeout: float | None = None) -> bool:
        """Block until the permit is ours.

        Returns ``False`` when *timeout* expires first; the waiter simply
        leaves the queue and the gate state stays as it was.
        """

        with self._condition:
            if not self._condition.wait_for(lambda: not self._held, timeout=timeout):
                LOGGER.warning("Permissão de consulta não obtida em %.1fs", timeout)
                return False
            self._held = True
            return True

    def release(self) -> None:
        """Wait ``spacing`` seconds from now, then hand the permit back."""

        with self._condition:
            if not self._held:
                raise RuntimeError("release() chamado sem permissão adquirida")

        ready_at = self._clock() + self.spacing
        try:
            remaining = ready_at - self._clock()
            while remaining > 0:
                self._sleeper(remaining)
                remaining = ready_at - self._clock()
        finally:
            with self._condition:
                self._held = False
                self._last_release = self._clock()
                self._condition.notify()

    @contextmanager
    def permit(self, timeout: float | None = None) -> Iterator[None]:
        """Hold the permit for the duration of the ``with`` block."""

        if not self.acquire(timeout=timeout):
            raise ThrottleTimeoutError(
                f"Limite de consultas ocupado por mais de {timeout}s"
            )
        try:
            yield
        finally:
            self.release()


__all__ = ["DEFAULT_SPACING_SECONDS", "ThrottleGate"]
