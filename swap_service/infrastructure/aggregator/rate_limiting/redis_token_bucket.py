"""Redis-backed token bucket, shared by every process using one API key.

API processes та Celery workers з тим самим AGGREGATOR_API_KEY витрачають
одну quota. Bucket state - Redis hash {tokens, updated_at}; refill +
take виконуються під WATCH/MULTI, конкурентний writer → WatchError → retry.
"""

import asyncio
import hashlib
import logging
import time
from typing import Callable

import redis.asyncio as redis
from redis.exceptions import WatchError

logger = logging.getLogger(__name__)

BUCKET_KEY_PREFIX = "swap:rate_limit:"
# Idle buckets disappear; a missing bucket starts full
BUCKET_IDLE_TTL_SECONDS = 3600


def bucket_key_for(api_key: str) -> str:
    """Redis key для API key (raw key не потрапляє в Redis)."""
    if not api_key:
        return f"{BUCKET_KEY_PREFIX}anonymous"
    digest = hashlib.sha256(api_key.encode()).hexdigest()[:16]
    return f"{BUCKET_KEY_PREFIX}{digest}"


class RedisTokenBucket:
    """Distributed token bucket: capacity tokens, refill_rate tokens/second.

    Example:
        >>> client = redis.from_url(settings.redis_url, decode_responses=True)
        >>> bucket = RedisTokenBucket(client, key=bucket_key_for(api_key))
        >>> await bucket.acquire()
    """

    def __init__(
        self,
        client: redis.Redis,
        key: str,
        capacity: int = 10,
        refill_rate: float = 1.0,
        clock: Callable[[], float] = time.time,
        owns_client: bool = False,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        if refill_rate <= 0:
            raise ValueError("refill_rate must be positive")

        self.redis = client
        self.key = key
        self.capacity = float(capacity)
        self.refill_rate = refill_rate
        self._clock = clock
        self._owns_client = owns_client

    def _refilled(self, state: dict[str, str], now: float) -> float:
        if not state:
            return self.capacity
        tokens = float(state["tokens"])
        elapsed = max(0.0, now - float(state["updated_at"]))
        return min(self.capacity, tokens + elapsed * self.refill_rate)

    async def try_acquire(self, tokens: float = 1.0) -> float:
        """Take tokens if available now.

        Returns:
            0.0 якщо tokens взяті, інакше seconds до їх появи.
        """
        async with self.redis.pipeline(transaction=True) as pipe:
            while True:
                try:
                    await pipe.watch(self.key)
                    now = self._clock()
                    available = self._refilled(await pipe.hgetall(self.key), now)
                    if available < tokens:
                        return (tokens - available) / self.refill_rate

                    pipe.multi()
                    pipe.hset(
                        self.key,
                        mapping={"tokens": repr(available - tokens), "updated_at": repr(now)},
                    )
                    pipe.expire(self.key, BUCKET_IDLE_TTL_SECONDS)
                    await pipe.execute()
                    return 0.0
                except WatchError:
                    logger.debug("rate_limiter.contended", extra={"key": self.key})
                    continue

    async def acquire(self, tokens: float = 1.0) -> None:
        """Wait until tokens are available, then take them."""
        if tokens > self.capacity:
            raise ValueError("Requested tokens exceed bucket capacity")

        while True:
            delay = await self.try_acquire(tokens)
            if delay <= 0:
                return
            logger.debug(
                "rate_limiter.waiting",
                extra={"key": self.key, "delay_seconds": round(delay, 3)},
            )
            await asyncio.sleep(delay)

    async def available_tokens(self) -> float:
        return self._refilled(await self.redis.hgetall(self.key), self._clock())

    async def close(self) -> None:
        if self._owns_client:
            await self.redis.aclose()
