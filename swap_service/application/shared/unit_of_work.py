"""Unit of Work pattern - manages transactions.

UnitOfWork забезпечує:
- Atomic operations (all or nothing)
- Transaction boundary
- Single commit per use case
"""

from abc import ABC, abstractmethod
from types import TracebackType
from typing import TYPE_CHECKING, Optional, Type

if TYPE_CHECKING:
    from swap_service.domain.swaps.repositories import TradeRepository


class UnitOfWork(ABC):
    """Abstract Unit of Work interface.

    Example (Use case uses):
        >>> async with uow:
        ...     trade = await uow.trades.get_by_id(trade_id, for_update=True)
        ...     trade.apply_upstream_status("finished", checked_at=now)
        ...     await uow.trades.save(trade)
        ...     await uow.commit()  # Single commit for entire operation

    Note:
        Один UoW instance = одна транзакція в один момент часу. Concurrent
        callers мають використовувати окремі UoW (див. uow_factory в handlers).
    """

    @abstractmethod
    async def __aenter__(self) -> "UnitOfWork":
        """Enter async context manager.

        Returns:
            Self (UnitOfWork instance).
        """
        pass

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        """Exit async context manager.

        Note:
            Якщо exc_type не None, має викликати rollback().
        """
        pass

    @abstractmethod
    async def commit(self) -> None:
        """Commit transaction.

        Raises:
            Exception: If commit failed.
        """
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Rollback transaction."""
        pass

    @property
    @abstractmethod
    def trades(self) -> "TradeRepository":
        """Trade Store bound to this transaction."""
        pass
