"""Minimum-interval rate limiter.

Provides:
- MinIntervalThrottle: Spaces dispatches at least ``min_interval`` seconds apart

Uses asyncio.Lock so callers sharing one instance observe and update the
last-dispatch timestamp one at a time.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class MinIntervalThrottle:
    """Hard spacing between consecutive dispatches from one client."""

    def __init__(
        self,
        min_interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if min_interval < 0:
            raise ValueError("min_interval must not be negative")
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_dispatch: Optional[float] = None  # None allows an immediate first call
        self._lock = asyncio.Lock()

    @property
    def last_dispatch(self) -> Optional[float]:
        return self._last_dispatch

    async def acquire(self) -> float:
        """Wait out the remaining interval, then stamp and return the dispatch time."""
        async with self._lock:
            if self._last_dispatch is not None:
                # Loop: event-loop timers may wake marginally early
                elapsed = self._clock() - self._last_dispatch
                while elapsed < self.min_interval:
                    wait = self.min_interval - elapsed
                    logger.debug(f"Throttling dispatch for {wait:.3f}s")
                    await self._sleep(wait)
                    elapsed = self._clock() - self._last_dispatch
            self._last_dispatch = self._clock()
            return self._last_dispatch
