"""Circuit breaker для aggregator client."""

from .circuit_breaker import CircuitBreaker, CircuitBreakerOpenError, CircuitState

__all__ = ["CircuitBreaker", "CircuitBreakerOpenError", "CircuitState"]
