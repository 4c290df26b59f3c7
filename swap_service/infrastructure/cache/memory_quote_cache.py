"""In-memory QuoteCache (single process).

Consumption linearizable через asyncio.Lock: check + remove виконуються
без await між ними.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from swap_service.domain.swaps.exceptions import (
    QuoteAlreadyUsed,
    QuoteExpired,
    QuoteNotFound,
)
from swap_service.domain.swaps.ports import QuoteCache
from swap_service.domain.swaps.value_objects import Quote

logger = logging.getLogger(__name__)

# Expired entries kept this long after expiry so lookups can still tell
# QuoteExpired apart from QuoteNotFound
RETENTION_AFTER_EXPIRY = timedelta(minutes=10)

# Consumed markers outlive any quote TTL; a later put() never revives them
CONSUMED_MARKER_RETENTION = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryQuoteCache(QuoteCache):
    """Dict-backed quote cache.

    Example:
        >>> cache = InMemoryQuoteCache()
        >>> token = await cache.put(quote)
        >>> await cache.consume(token)  # Quote
        >>> await cache.consume(token)  # raises QuoteAlreadyUsed
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._quotes: dict[str, Quote] = {}
        self._consumed: dict[str, datetime] = {}  # token -> purge after
        self._lock = asyncio.Lock()

    async def put(self, quote: Quote) -> str:
        async with self._lock:
            self._purge(self._clock())
            if quote.quote_token in self._consumed:
                logger.warning(
                    "quote_cache.put_consumed_token",
                    extra={"quote_token": quote.quote_token},
                )
                return quote.quote_token
            self._quotes[quote.quote_token] = quote
        return quote.quote_token

    async def peek(self, quote_token: str) -> Quote:
        async with self._lock:
            quote = self._quotes.get(quote_token)
            if quote is None:
                raise QuoteNotFound("Quote not found", quote_token=quote_token)
            if quote.is_expired(self._clock()):
                raise QuoteExpired(
                    "Quote expired", quote_token=quote_token, expires_at=quote.expires_at
                )
            return quote

    async def consume(self, quote_token: str) -> Quote:
        async with self._lock:
            now = self._clock()
            if quote_token in self._consumed:
                raise QuoteAlreadyUsed("Quote already used", quote_token=quote_token)
            quote = self._quotes.get(quote_token)
            if quote is None:
                raise QuoteNotFound("Quote not found", quote_token=quote_token)
            if quote.is_expired(now):
                raise QuoteExpired(
                    "Quote expired", quote_token=quote_token, expires_at=quote.expires_at
                )

            del self._quotes[quote_token]
            self._consumed[quote_token] = now + CONSUMED_MARKER_RETENTION

        logger.debug("quote_cache.consumed", extra={"quote_token": quote_token})
        return quote

    async def is_consumed(self, quote_token: str) -> bool:
        async with self._lock:
            return quote_token in self._consumed

    def _purge(self, now: datetime) -> None:
        stale = [
            token
            for token, quote in self._quotes.items()
            if quote.expires_at + RETENTION_AFTER_EXPIRY < now
        ]
        for token in stale:
            del self._quotes[token]

        for token in [t for t, purge_at in self._consumed.items() if purge_at < now]:
            del self._consumed[token]

    def __len__(self) -> int:
        return len(self._quotes)
