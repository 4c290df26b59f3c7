"""Factory для aggregator client з application settings."""

import logging

import redis.asyncio as redis

from swap_service.config import Settings
from swap_service.domain.swaps.ports import AggregatorPort

from .adapters import TrocadorAdapter
from .circuit_breakers import CircuitBreaker
from .errors import AggregatorErrorResponse
from .rate_limiting import RedisTokenBucket, TokenBucket, bucket_key_for

logger = logging.getLogger(__name__)


def create_aggregator(settings: Settings) -> AggregatorPort:
    """Build TrocadorAdapter з retry, circuit breaker та token bucket.

    Args:
        settings: Application settings (AGGREGATOR_* group).

    Returns:
        AggregatorPort implementation.
    """
    if not settings.aggregator_api_key:
        logger.warning("aggregator.api_key_missing")

    circuit = CircuitBreaker(
        name="trocador",
        failure_threshold=settings.circuit_breaker_failure_threshold,
        timeout_seconds=settings.circuit_breaker_recovery_timeout,
        ignored_exceptions=(AggregatorErrorResponse,),
    )
    return TrocadorAdapter(
        api_key=settings.aggregator_api_key,
        base_url=settings.aggregator_base_url,
        timeout_seconds=settings.aggregator_timeout_seconds,
        max_retries=settings.aggregator_max_retries,
        retry_base_delay=settings.aggregator_retry_base_delay,
        retry_max_delay=settings.aggregator_retry_max_delay,
        circuit_breaker=circuit,
        rate_limiter=create_rate_limiter(settings),
    )


def create_rate_limiter(settings: Settings) -> TokenBucket | RedisTokenBucket:
    """Token bucket за AGGREGATOR_RATE_LIMIT_BACKEND."""
    if settings.aggregator_rate_limit_backend == "redis":
        client = redis.from_url(settings.redis_url, decode_responses=True)
        logger.info("aggregator.rate_limiter", extra={"backend": "redis"})
        return RedisTokenBucket(
            client,
            key=bucket_key_for(settings.aggregator_api_key),
            capacity=settings.aggregator_rate_limit_capacity,
            refill_rate=settings.aggregator_rate_limit_refill_per_second,
            owns_client=True,
        )

    logger.info("aggregator.rate_limiter", extra={"backend": "memory"})
    return TokenBucket(
        capacity=settings.aggregator_rate_limit_capacity,
        refill_rate=settings.aggregator_rate_limit_refill_per_second,
    )
