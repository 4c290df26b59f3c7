"""Circuit Breaker pattern для захисту від cascade failures.

Коли aggregator down:
- Без circuit breaker: Кожен request чекає timeout → fail (повільно)
- З circuit breaker: Після N failures → OPEN → fast fail

State Machine:
CLOSED (normal) → OPEN (failing) → HALF_OPEN (testing) → CLOSED/OPEN
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "CLOSED"  # Нормальний стан - пропускаємо requests
    OPEN = "OPEN"  # Failure стан - reject requests (fast fail)
    HALF_OPEN = "HALF_OPEN"  # Testing стан - спробуємо request


class CircuitBreakerOpenError(Exception):
    """Exception коли circuit breaker OPEN (fast fail)."""

    pass


class CircuitBreaker:
    """Circuit Breaker implementation.

    Args:
        name: Ім'я для logs (e.g. "trocador").
        failure_threshold: Кількість consecutive failures для OPEN (default: 5).
        timeout_seconds: Скільки секунд circuit залишається OPEN (default: 60).
        success_threshold: Кількість successes в HALF_OPEN для CLOSED (default: 2).
        ignored_exceptions: Exceptions що пропускаються без зміни стану
            (business responses, e.g. UpstreamRejected - aggregator живий).

    Example:
        >>> circuit = CircuitBreaker("trocador", failure_threshold=5, timeout_seconds=60)
        >>> await circuit.call(adapter._fetch_rates, params)
    """

    def __init__(
        self,
        name: str = "default",
        failure_threshold: int = 5,
        timeout_seconds: float = 60,
        success_threshold: int = 2,
        ignored_exceptions: tuple[Type[BaseException], ...] = (),
    ) -> None:
        self.name = name
        self.failure_threshold = failure_threshold
        self.timeout_seconds = timeout_seconds
        self.success_threshold = success_threshold
        self.ignored_exceptions = ignored_exceptions

        # State
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._opened_at: float | None = None

        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        """Get current circuit state."""
        return self._state

    async def call(
        self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        """Execute function через circuit breaker.

        Raises:
            CircuitBreakerOpenError: Якщо circuit OPEN.
            Exception: Будь-яка exception від func.
        """
        async with self._lock:
            if self._state == CircuitState.OPEN:
                if self._should_attempt_reset():
                    logger.info(
                        "circuit_breaker.half_open",
                        extra={
                            "circuit": self.name,
                            "previous_failures": self._failure_count,
                        },
                    )
                    self._state = CircuitState.HALF_OPEN
                    self._success_count = 0
                else:
                    logger.warning(
                        "circuit_breaker.rejected",
                        extra={
                            "circuit": self.name,
                            "state": self._state.value,
                            "failure_count": self._failure_count,
                        },
                    )
                    raise CircuitBreakerOpenError(
                        f"Circuit breaker OPEN for {self.name}, retry later"
                    )

        try:
            result = await func(*args, **kwargs)
        except self.ignored_exceptions:
            async with self._lock:
                self._on_success()
            raise
        except Exception:
            async with self._lock:
                self._on_failure()
            raise

        async with self._lock:
            self._on_success()

        return result

    def _on_success(self) -> None:
        """Handle successful call."""
        if self._state == CircuitState.HALF_OPEN:
            self._success_count += 1

            if self._success_count >= self.success_threshold:
                logger.info(
                    "circuit_breaker.closed",
                    extra={
                        "circuit": self.name,
                        "success_count": self._success_count,
                        "previous_failures": self._failure_count,
                    },
                )
                self._state = CircuitState.CLOSED
                self._failure_count = 0
                self._success_count = 0

        elif self._state == CircuitState.CLOSED:
            self._failure_count = 0

    def _on_failure(self) -> None:
        """Handle failed call."""
        self._failure_count += 1

        if self._state == CircuitState.HALF_OPEN:
            logger.warning(
                "circuit_breaker.reopened",
                extra={"circuit": self.name, "failure_count": self._failure_count},
            )
            self._state = CircuitState.OPEN
            self._opened_at = time.monotonic()

        elif self._state == CircuitState.CLOSED:
            if self._failure_count >= self.failure_threshold:
                logger.error(
                    "circuit_breaker.opened",
                    extra={
                        "circuit": self.name,
                        "failure_count": self._failure_count,
                        "threshold": self.failure_threshold,
                    },
                )
                self._state = CircuitState.OPEN
                self._opened_at = time.monotonic()

    def _should_attempt_reset(self) -> bool:
        """Check if circuit should transition OPEN → HALF_OPEN."""
        if self._opened_at is None:
            return True
        return time.monotonic() - self._opened_at >= self.timeout_seconds
