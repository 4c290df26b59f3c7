"""Exponential backoff retry logic for aggregator API calls.

- Aggregator API може бути тимчасово недоступний (rate limits, network issues)
- Read-only calls (rates, status, validate) безпечно повторювати
- create_trade НІКОЛИ не обгортається retry: повтор може створити другий
  upstream trade
"""

import asyncio
import logging
from functools import wraps
from typing import Any, Callable, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryableError(Exception):
    """Base exception для errors які можна retry.

    Example:
        >>> raise RetryableError("Rate limit exceeded, retry in 1s")
    """

    pass


def retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    retryable_exceptions: tuple[Type[Exception], ...] = (RetryableError,),
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator для retry з exponential backoff (delay подвоюється).

    Args:
        max_retries: Максимальна кількість повторів (attempts = max_retries + 1).
        base_delay: Затримка перед першим повтором, seconds.
        max_delay: Cap затримки, seconds.
        retryable_exceptions: Exceptions які можна retry.

    Example:
        >>> @retry_with_backoff(max_retries=2, base_delay=1.0, max_delay=4.0)
        ... async def fetch_rates():
        ...     return await client.get("/new_rate", params=params)
        >>> # fail → 1s → fail → 2s → fail → raise
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        if not asyncio.iscoroutinefunction(func):
            raise TypeError("retry_with_backoff supports async functions only")

        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> T:
            attempt = 0
            while True:
                try:
                    result = await func(*args, **kwargs)
                except retryable_exceptions as e:
                    if attempt >= max_retries:
                        logger.error(
                            "retry.exhausted",
                            extra={
                                "function": func.__name__,
                                "total_attempts": attempt + 1,
                                "error": str(e),
                            },
                        )
                        raise

                    delay = min(base_delay * 2**attempt, max_delay)
                    attempt += 1
                    logger.warning(
                        "retry.attempt",
                        extra={
                            "function": func.__name__,
                            "attempt": attempt,
                            "max_retries": max_retries,
                            "delay_seconds": delay,
                            "error": str(e),
                        },
                    )
                    await asyncio.sleep(delay)
                    continue

                if attempt > 0:
                    logger.info(
                        "retry.success",
                        extra={"function": func.__name__, "attempt": attempt + 1},
                    )
                return result

        return async_wrapper  # type: ignore

    return decorator
