"""Token bucket limiter for outbound extraction requests.

Keeps batch scraping under the provider's request ceiling without a
background refill task: the bucket is topped up lazily on every
``acquire()`` and the caller sleeps when it is empty.
"""

from __future__ import annotations

import asyncio
import math
import time
from typing import TYPE_CHECKING

from price_scraper.observability.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


logger = get_logger(__name__)


class TokenBucketRateLimiter:
    """Token bucket with capacity ``max_tokens`` and ``refill_per_minute`` refill.

    Tokens are minted in whole units: ``floor(elapsed / period)`` tokens are
    added per acquire, where ``period = 60 / refill_per_minute`` seconds, and
    the refill timestamp then moves to the current time.

    Example:
        ```python
        limiter = TokenBucketRateLimiter(max_tokens=8, refill_per_minute=8)
        await limiter.acquire()  # returns immediately for the first 8 calls
        ```
    """

    def __init__(
        self,
        max_tokens: int = 8,
        refill_per_minute: int = 8,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize a full bucket.

        Args:
            max_tokens: Bucket capacity.
            refill_per_minute: Tokens minted per minute.
            clock: Monotonic clock in seconds.
            sleep: Coroutine used to suspend the caller.
        """
        if max_tokens < 1 or refill_per_minute < 1:
            msg = "max_tokens and refill_per_minute must be positive"
            raise ValueError(msg)

        self.max_tokens = max_tokens
        self.refill_per_minute = refill_per_minute
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(max_tokens)
        self._last_refill = clock()
        self._lock = asyncio.Lock()

    @property
    def refill_period(self) -> float:
        """Seconds between two minted tokens."""
        return 60.0 / self.refill_per_minute

    @property
    def tokens(self) -> float:
        """Tokens currently in the bucket (as of the last acquire)."""
        return self._tokens

    async def acquire(self) -> None:
        """Wait until a token is available, then consume it. Never fails."""
        async with self._lock:
            now = self._clock()
            elapsed = max(0.0, now - self._last_refill)
            period = self.refill_period

            minted = math.floor(elapsed / period)
            self._tokens = min(float(self.max_tokens), self._tokens + minted)
            self._last_refill = now

            if self._tokens <= 0:
                wait = period - (elapsed % period)
                logger.debug("Rate limiter waiting for token", wait_seconds=round(wait, 3))
                await self._sleep(wait)
                # The token minted while sleeping is consumed immediately.
                self._last_refill = self._clock()
                self._tokens = 0.0
            else:
                self._tokens -= 1
