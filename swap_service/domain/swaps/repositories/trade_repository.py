"""TradeRepository Port - interface для persistence swap trades (Trade Store).

Це PORT в Hexagonal Architecture (domain визначає interface).
Infrastructure layer має implement цей interface.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ..entities import SwapTrade
from ..value_objects import TradeStatus


class TradeRepository(ABC):
    """Abstract interface для swap trade persistence.

    Trades ніколи не видаляються: немає delete операції.

    Example (Infrastructure implements):
        >>> class SQLAlchemyTradeRepository(TradeRepository):
        ...     async def insert(self, trade: SwapTrade) -> None:
        ...         self.session.add(self.mapper.to_model(trade))
        ...         await self.session.flush()

    Example (Engine uses):
        >>> trade = await uow.trades.get_by_id(trade_id, for_update=True)
        >>> trade.apply_upstream_status("confirming", checked_at=now)
        >>> await uow.trades.save(trade)
        >>> await uow.commit()
    """

    @abstractmethod
    async def insert(self, trade: SwapTrade) -> None:
        """Insert new trade.

        Args:
            trade: Freshly created SwapTrade (status CREATED).

        Raises:
            DuplicateUpstreamId: Якщо upstream_trade_id (або quote_token)
                вже записаний.
        """
        pass

    @abstractmethod
    async def get_by_id(
        self, trade_id: str, for_update: bool = False
    ) -> Optional[SwapTrade]:
        """Get trade by local ID.

        Args:
            trade_id: Local trade ID.
            for_update: Lock row (SELECT ... FOR UPDATE) до кінця транзакції.

        Returns:
            SwapTrade або None якщо не знайдено.
        """
        pass

    @abstractmethod
    async def get_by_upstream_id(self, upstream_trade_id: str) -> Optional[SwapTrade]:
        """Get trade by aggregator trade ID.

        Використовується create_trade retry path для recovery після
        DuplicateUpstreamId.
        """
        pass

    @abstractmethod
    async def save(self, trade: SwapTrade) -> None:
        """Persist mutable state існуючого trade.

        Зберігає тільки reconciliation fields (status, upstream_status,
        upstream_amount_to, last_checked_at, terminal_at). Immutable
        quote parameters не перезаписуються.

        Raises:
            TradeNotFound: Якщо row не існує.
        """
        pass

    @abstractmethod
    async def update_status(
        self, trade_id: str, new_status: TradeStatus, checked_at: datetime
    ) -> bool:
        """Apply status transition на write path.

        Row перечитується FOR UPDATE, transition перевіряється state machine.
        Illegal transition (backward, out of terminal) - no-op, не error.

        Args:
            trade_id: Local trade ID.
            new_status: Target status.
            checked_at: Observation timestamp (завжди оновлює last_checked_at).

        Returns:
            True якщо status змінився.

        Raises:
            TradeNotFound: Якщо trade_id невідомий.
        """
        pass

    @abstractmethod
    async def list_refresh_candidates(
        self, stale_before: datetime, limit: int = 100
    ) -> list[SwapTrade]:
        """Non-terminal trades з last_checked_at < stale_before.

        Returns:
            Oldest-checked first, не більше limit.
        """
        pass
