"""Redis-backed QuoteCache (shared across API processes and workers).

Keys:
    swap:quote:{token}           quote JSON, TTL = time to expiry + retention
    swap:quote:consumed:{token}  consumption marker, claimed with SET NX EX

consume() = GET → expiry check → SET NX marker (atomic claim) → DEL quote.
Рівно один caller виграє SET NX; решта отримує QuoteAlreadyUsed.
Marker ніколи не видаляється: put() того самого token після consume
не робить його знову usable.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Callable

import redis.asyncio as redis

from swap_service.domain.swaps.exceptions import (
    QuoteAlreadyUsed,
    QuoteExpired,
    QuoteNotFound,
)
from swap_service.domain.swaps.ports import QuoteCache
from swap_service.domain.swaps.value_objects import Quote

from .memory_quote_cache import CONSUMED_MARKER_RETENTION, RETENTION_AFTER_EXPIRY
from .serialization import quote_from_json, quote_to_json

logger = logging.getLogger(__name__)

QUOTE_KEY_PREFIX = "swap:quote:"
CONSUMED_KEY_PREFIX = "swap:quote:consumed:"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RedisQuoteCache(QuoteCache):
    """Quote cache на redis.asyncio.

    Example:
        >>> client = redis.from_url(settings.redis_url, decode_responses=True)
        >>> cache = RedisQuoteCache(client)
        >>> token = await cache.put(quote)
    """

    def __init__(
        self,
        client: redis.Redis,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.redis = client
        self._clock = clock

    @staticmethod
    def _quote_key(quote_token: str) -> str:
        return f"{QUOTE_KEY_PREFIX}{quote_token}"

    @staticmethod
    def _consumed_key(quote_token: str) -> str:
        return f"{CONSUMED_KEY_PREFIX}{quote_token}"

    def _ttl_seconds(self, quote: Quote) -> int:
        remaining = quote.seconds_to_expiry(self._clock())
        retention = RETENTION_AFTER_EXPIRY.total_seconds()
        return max(1, math.ceil(remaining + retention))

    async def put(self, quote: Quote) -> str:
        token = quote.quote_token
        if await self.is_consumed(token):
            logger.warning("quote_cache.put_consumed_token", extra={"quote_token": token})
            return token

        # A consume racing this SET still fails: its marker claim is SET NX
        await self.redis.set(
            self._quote_key(token), quote_to_json(quote), ex=self._ttl_seconds(quote)
        )
        return token

    async def peek(self, quote_token: str) -> Quote:
        raw = await self.redis.get(self._quote_key(quote_token))
        if raw is None:
            raise QuoteNotFound("Quote not found", quote_token=quote_token)

        quote = quote_from_json(raw)
        if quote.is_expired(self._clock()):
            raise QuoteExpired(
                "Quote expired", quote_token=quote_token, expires_at=quote.expires_at
            )
        return quote

    async def consume(self, quote_token: str) -> Quote:
        quote_key = self._quote_key(quote_token)
        consumed_key = self._consumed_key(quote_token)

        if await self.redis.exists(consumed_key):
            raise QuoteAlreadyUsed("Quote already used", quote_token=quote_token)

        raw = await self.redis.get(quote_key)
        if raw is None:
            raise QuoteNotFound("Quote not found", quote_token=quote_token)

        quote = quote_from_json(raw)
        if quote.is_expired(self._clock()):
            raise QuoteExpired(
                "Quote expired", quote_token=quote_token, expires_at=quote.expires_at
            )

        claimed = await self.redis.set(
            consumed_key,
            "1",
            nx=True,
            ex=int(CONSUMED_MARKER_RETENTION.total_seconds()),
        )
        if not claimed:
            logger.info("quote_cache.consume_lost_race", extra={"quote_token": quote_token})
            raise QuoteAlreadyUsed("Quote already used", quote_token=quote_token)

        await self.redis.delete(quote_key)
        logger.debug("quote_cache.consumed", extra={"quote_token": quote_token})
        return quote

    async def is_consumed(self, quote_token: str) -> bool:
        return bool(await self.redis.exists(self._consumed_key(quote_token)))

    async def close(self) -> None:
        await self.redis.aclose()
