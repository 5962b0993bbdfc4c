import asyncio
import time
from collections.abc import Awaitable, Callable

import structlog

from stockwatch.config import settings

logger = structlog.get_logger()


class RequestThrottle:
    """Spaces upstream call starts at least ``min_interval`` seconds apart.

    The provider enforces its quota per API key, so one instance is shared by
    every request type. Waiters are served in arrival order; the lock covers the
    whole read-wait-write of the last start time.
    """

    def __init__(
        self,
        min_interval: float = 12.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_call: float | None = None

    @property
    def min_interval(self) -> float:
        return self._min_interval

    @property
    def last_call(self) -> float | None:
        return self._last_call

    async def acquire(self) -> None:
        async with self._lock:
            if self._last_call is not None:
                wait = self._last_call + self._min_interval - self._clock()
                if wait > 0:
                    logger.debug("throttle_wait", seconds=round(wait, 3))
                    await self._sleep(wait)
            self._last_call = self._clock()


_throttle: RequestThrottle | None = None


def get_throttle() -> RequestThrottle:
    global _throttle
    if _throttle is None:
        _throttle = RequestThrottle(min_interval=settings.min_request_interval)
    return _throttle
