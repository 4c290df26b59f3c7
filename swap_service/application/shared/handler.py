"""Base Handler classes для Commands та Queries.

Handler - orchestrates domain logic для виконання use case.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from .command import Command
from .query import Query

TCommand = TypeVar("TCommand", bound=Command)
TQuery = TypeVar("TQuery", bound=Query)
TResult = TypeVar("TResult")


class CommandHandler(ABC, Generic[TCommand, TResult]):
    """Base class для command handlers.

    Command Handler відповідає за:
    - Load aggregates з repository
    - Execute domain logic (aggregate methods)
    - Save changes через Unit of Work
    - Publish domain events

    Example:
        >>> class CreateTradeHandler(CommandHandler[CreateTradeCommand, TradeDTO]):
        ...     async def handle(self, command: CreateTradeCommand) -> TradeDTO:
        ...         quote = await self.quote_cache.consume(command.quote_token)
        ...         upstream = await self.aggregator.create_trade(quote, ...)
        ...         async with self.uow:
        ...             trade = SwapTrade.create_from_quote(quote, upstream, ...)
        ...             await self.uow.trades.insert(trade)
        ...             await self.uow.commit()
        ...         return TradeDTO.from_entity(trade)
    """

    @abstractmethod
    async def handle(self, command: TCommand) -> TResult:
        """Handle command and return result.

        Raises:
            DomainException: If business rule violated.
        """
        pass


class QueryHandler(ABC, Generic[TQuery, TResult]):
    """Base class для query handlers.

    Query Handler відповідає за:
    - Fetch data з repository або aggregator
    - Transform to DTOs
    """

    @abstractmethod
    async def handle(self, query: TQuery) -> TResult:
        """Handle query and return result."""
        pass
