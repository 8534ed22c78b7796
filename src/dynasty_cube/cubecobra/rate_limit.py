"""Outbound rate limiter for the CubeCobra API.

Learn: CubeCobra has no published rate limit, so we are polite — at most
one request starts every `delay_seconds`. The gap is measured between
call *starts*, not completions: a slow response does not buy the next
caller any extra wait.

The limiter is an object, not a module global. The app owns one instance
(app.state.rate_limiter); tests build their own with a fake clock.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional

import structlog

logger = structlog.get_logger()

REQUEST_DELAY_SECONDS = 5.0


class RateLimiter:
    """Serialize calls so successive starts are >= delay_seconds apart."""

    def __init__(
        self,
        delay_seconds: float = REQUEST_DELAY_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.delay_seconds = delay_seconds
        self.last_request_at: Optional[float] = None
        self._clock = clock
        self._sleep = sleep
        # Read-then-write of last_request_at must not interleave
        self._lock = asyncio.Lock()

    async def wait(self) -> None:
        """Suspend until the next request may start, then claim the slot."""
        async with self._lock:
            if self.last_request_at is not None:
                elapsed = self._clock() - self.last_request_at
                if elapsed < self.delay_seconds:
                    wait_for = self.delay_seconds - elapsed
                    logger.debug("cubecobra.rate_limited", wait_seconds=round(wait_for, 3))
                    await self._sleep(wait_for)
            self.last_request_at = self._clock()

    def reset(self) -> None:
        """Forget the previous request; the next wait() returns immediately."""
        self.last_request_at = None
