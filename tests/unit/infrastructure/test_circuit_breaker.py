"""Unit tests для CircuitBreaker."""

import pytest

from swap_service.infrastructure.aggregator.circuit_breakers import (
    CircuitBreaker,
    CircuitBreakerOpenError,
    CircuitState,
)


class BusinessRefusal(Exception):
    pass


async def fail():
    raise ConnectionError("down")


async def ok():
    return "ok"


async def refuse():
    raise BusinessRefusal("amount too low")


class TestCircuitBreaker:
    async def test_opens_after_threshold_failures(self):
        # Arrange
        circuit = CircuitBreaker(name="test", failure_threshold=3)

        # Act
        for _ in range(3):
            with pytest.raises(ConnectionError):
                await circuit.call(fail)

        # Assert
        assert circuit.state == CircuitState.OPEN
        with pytest.raises(CircuitBreakerOpenError):
            await circuit.call(ok)

    async def test_success_resets_failure_count(self):
        circuit = CircuitBreaker(name="test", failure_threshold=2)

        with pytest.raises(ConnectionError):
            await circuit.call(fail)
        await circuit.call(ok)
        with pytest.raises(ConnectionError):
            await circuit.call(fail)

        assert circuit.state == CircuitState.CLOSED

    async def test_half_open_closes_after_successes(self):
        # Arrange: timeout 0 → наступний call переходить у HALF_OPEN
        circuit = CircuitBreaker(
            name="test", failure_threshold=1, timeout_seconds=0, success_threshold=2
        )
        with pytest.raises(ConnectionError):
            await circuit.call(fail)

        # Act
        assert await circuit.call(ok) == "ok"
        assert circuit.state == CircuitState.HALF_OPEN
        await circuit.call(ok)

        # Assert
        assert circuit.state == CircuitState.CLOSED

    async def test_failure_in_half_open_reopens(self):
        circuit = CircuitBreaker(name="test", failure_threshold=1, timeout_seconds=0)
        with pytest.raises(ConnectionError):
            await circuit.call(fail)

        with pytest.raises(ConnectionError):
            await circuit.call(fail)

        assert circuit.state == CircuitState.OPEN

    async def test_ignored_exceptions_do_not_count(self):
        circuit = CircuitBreaker(
            name="test", failure_threshold=1, ignored_exceptions=(BusinessRefusal,)
        )

        for _ in range(3):
            with pytest.raises(BusinessRefusal):
                await circuit.call(refuse)

        assert circuit.state == CircuitState.CLOSED
