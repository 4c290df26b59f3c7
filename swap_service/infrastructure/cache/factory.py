"""Factory для QuoteCache backend (QUOTE_CACHE_BACKEND)."""

import logging

import redis.asyncio as redis

from swap_service.config import Settings
from swap_service.domain.swaps.ports import QuoteCache

from .memory_quote_cache import InMemoryQuoteCache
from .redis_quote_cache import RedisQuoteCache

logger = logging.getLogger(__name__)


def create_quote_cache(settings: Settings) -> QuoteCache:
    """Build quote cache backend.

    memory - тільки для single-process deployment (dev, tests).
    """
    if settings.quote_cache_backend == "redis":
        client = redis.from_url(settings.redis_url, decode_responses=True)
        logger.info("quote_cache.backend", extra={"backend": "redis"})
        return RedisQuoteCache(client)

    logger.info("quote_cache.backend", extra={"backend": "memory"})
    return InMemoryQuoteCache()
