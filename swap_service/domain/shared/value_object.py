"""Base ValueObject class for domain model."""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True, eq=True)
class ValueObject(ABC):
    """Base class for all domain value objects.

    - **Immutable**: frozen=True
    - **Equality by value**: порівнюється за значенням атрибутів
    - **No identity**: не має власного ID

    Example:
        >>> @dataclass(frozen=True)
        ... class AddressVerdict(ValueObject):
        ...     valid: bool
        ...     reason: str | None = None

        >>> AddressVerdict(True) == AddressVerdict(True)  # True
    """

    def __post_init__(self) -> None:
        """Hook для валідації після ініціалізації.

        Raises:
            ValueError: If validation fails.
        """
        pass


def validate_value_object(condition: bool, message: str) -> None:
    """Helper для валідації в value objects.

    Args:
        condition: Умова яка має бути True.
        message: Повідомлення помилки якщо condition False.

    Raises:
        ValueError: If condition is False.
    """
    if not condition:
        raise ValueError(message)
