"""Base Command class для CQRS pattern.

Command - запит на зміну стану системи (write operation).
"""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True)
class Command(ABC):
    """Base class для всіх commands.

    - **Immutable**: frozen=True запобігає змінам
    - **Verb-based naming**: CreateTrade, RefreshStaleTrades
    - **No business logic**: Тільки data, logic в Handler

    Example:
        >>> @dataclass(frozen=True)
        ... class CreateTradeCommand(Command):
        ...     quote_token: str
        ...     address: str
        ...     refund_address: str | None = None

        >>> trade = await handler.handle(CreateTradeCommand(quote_token="ab:cn", address="4A.."))
    """

    pass
