"""Base domain exceptions.

Domain exceptions представляють порушення бізнес-правил.
Вони частина domain layer і не залежать від infrastructure.
"""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain errors.

    Example:
        >>> raise DomainException("Quote already used", quote_token="abc")
    """

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize domain exception.

        Args:
            message: Human-readable error message.
            **context: Additional context (trade_id, quote_token, etc).
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class BusinessRuleViolation(DomainException):
    """Exception raised when business rule is violated."""

    pass


class AggregateNotFound(DomainException):
    """Exception raised when aggregate is not found.

    Example:
        >>> trade = await uow.trades.get_by_id("7f3c...")
        >>> if trade is None:
        ...     raise AggregateNotFound("Trade not found", trade_id="7f3c...")
    """

    pass
