"""Minimum-interval rate limiter shared by the upstream API clients.

Each upstream gets its own limiter instance, so the Pollen API (1 req / 500ms)
and Nominatim (1 req / s) budgets never interfere with each other.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional


class RateLimiter:
    """Allow at most one acquire per ``interval`` seconds.

    Usage:
        limiter = RateLimiter(0.5)
        await limiter.acquire()  # blocks until a slot is free
    """

    def __init__(
        self,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._last: Optional[float] = None
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Block until the next slot is available, then claim it."""
        async with self._lock:
            if self._last is not None:
                wait_time = self.interval - (self._clock() - self._last)
                if wait_time > 0:
                    await self._sleep(wait_time)
            self._last = self._clock()
