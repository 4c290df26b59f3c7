"""Async token bucket rate limiter.

Aggregator API має per-key quota. Замість fail при вичерпаному bucket
caller чекає наступний token.
"""

import asyncio
import logging
import time

logger = logging.getLogger(__name__)


class TokenBucket:
    """Token bucket: capacity tokens, refill_rate tokens/second.

    Example:
        >>> bucket = TokenBucket(capacity=10, refill_rate=1.0)
        >>> await bucket.acquire()  # returns immediately while tokens remain
    """

    def __init__(self, capacity: int = 10, refill_rate: float = 1.0) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        if refill_rate <= 0:
            raise ValueError("refill_rate must be positive")

        self.capacity = float(capacity)
        self.refill_rate = refill_rate
        self._tokens = float(capacity)
        self._last_refill = time.monotonic()
        self._lock = asyncio.Lock()

    @property
    def available_tokens(self) -> float:
        """Tokens available after refill."""
        self._refill()
        return self._tokens

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(self.capacity, self._tokens + elapsed * self.refill_rate)
        self._last_refill = now

    def try_acquire(self, tokens: float = 1.0) -> bool:
        """Take tokens if available now.

        Returns:
            True if tokens acquired, False if insufficient.
        """
        self._refill()
        if self._tokens >= tokens:
            self._tokens -= tokens
            return True
        return False

    def wait_time(self, tokens: float = 1.0) -> float:
        """Seconds until tokens become available (0.0 if available now)."""
        self._refill()
        if self._tokens >= tokens:
            return 0.0
        return (tokens - self._tokens) / self.refill_rate

    async def acquire(self, tokens: float = 1.0) -> None:
        """Wait until tokens are available, then take them.

        Lock тримається під час очікування: callers обслуговуються FIFO.
        """
        if tokens > self.capacity:
            raise ValueError("Requested tokens exceed bucket capacity")

        async with self._lock:
            delay = self.wait_time(tokens)
            if delay > 0:
                logger.debug(
                    "rate_limiter.waiting",
                    extra={"delay_seconds": round(delay, 3)},
                )
                await asyncio.sleep(delay)
            if not self.try_acquire(tokens):
                # sleep covered the deficit
                self._tokens = 0.0
                self._last_refill = time.monotonic()

    async def close(self) -> None:
        """Nothing to release (process-local state)."""
        return None
