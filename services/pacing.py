"""Pacing and concurrency primitives for external classification calls."""

import asyncio
import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


class CallPacer:
    """Keeps successive call starts at least *interval* seconds apart.

    Waiters are served one at a time, so the bound also holds when several
    scenes are classified concurrently.
    """

    def __init__(
        self,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval < 0:
            raise ValueError("Pacing interval must not be negative")
        self.interval = interval
        self._clock = clock
        self._lock = asyncio.Lock()
        self._last_start: float | None = None

    async def wait(self) -> None:
        """Return once the next call may start."""
        async with self._lock:
            if self._last_start is not None and self.interval > 0:
                delay = self._last_start + self.interval - self._clock()
                if delay > 0:
                    await asyncio.sleep(delay)
            self._last_start = self._clock()


class NoPacer(CallPacer):
    """Pacer that never waits."""

    def __init__(self) -> None:
        super().__init__(0.0)

    async def wait(self) -> None:
        return None


class ConcurrencyLimiter:
    """Bounds the number of scenes classified at the same time."""

    MAX_LIMIT = 4

    def __init__(self, limit: int = 1) -> None:
        if not 1 <= limit <= self.MAX_LIMIT:
            raise ValueError(f"Concurrency limit must be between 1 and {self.MAX_LIMIT}")
        self.limit = limit
        self._semaphore = asyncio.Semaphore(limit)

    async def __aenter__(self) -> "ConcurrencyLimiter":
        await self._semaphore.acquire()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self._semaphore.release()
