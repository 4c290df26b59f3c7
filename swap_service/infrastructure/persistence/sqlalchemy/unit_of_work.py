"""SQLAlchemy Unit of Work implementation."""

import logging
from types import TracebackType
from typing import Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from swap_service.application.shared import UnitOfWork
from swap_service.domain.swaps.repositories import TradeRepository
from swap_service.infrastructure.persistence.sqlalchemy.repositories import (
    SQLAlchemyTradeRepository,
)

logger = logging.getLogger(__name__)


class SQLAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of Unit of Work pattern.

    Відповідальності:
    - Керування SQLAlchemy async session
    - Transaction management (commit/rollback)
    - Automatic rollback при exceptions
    - Lazy initialization of repositories

    Example:
        >>> uow = SQLAlchemyUnitOfWork(session_factory)
        >>> async with uow:
        ...     trade = await uow.trades.get_by_id(trade_id, for_update=True)
        ...     trade.apply_upstream_status("finished", checked_at=now)
        ...     await uow.trades.save(trade)
        ...     await uow.commit()
    """

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None
        self._trades: Optional[TradeRepository] = None

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        self._session = self._session_factory()
        logger.debug("unit_of_work.started")
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        """Exit async context manager.

        Note:
            - Якщо exc_type не None → rollback
            - Завжди закриває session (cleanup)
        """
        try:
            if exc_type is not None:
                await self.rollback()
                logger.warning(
                    "unit_of_work.rolled_back",
                    extra={"exception_type": exc_type.__name__},
                )
        finally:
            if self._session:
                await self._session.close()
                self._session = None
                self._trades = None

            logger.debug("unit_of_work.closed")

    async def commit(self) -> None:
        """Commit transaction.

        Raises:
            Exception: If commit failed (DB error, constraint violation, etc.).
        """
        if self._session is None:
            raise RuntimeError("Unit of Work not started (use async with)")

        try:
            await self._session.commit()
            logger.debug("unit_of_work.committed")
        except Exception as e:
            logger.error("unit_of_work.commit_failed", extra={"error": str(e)})
            await self.rollback()
            raise

    async def rollback(self) -> None:
        if self._session is None:
            raise RuntimeError("Unit of Work not started (use async with)")

        await self._session.rollback()
        logger.debug("unit_of_work.rolled_back")

    @property
    def trades(self) -> TradeRepository:
        """Get TradeRepository instance (lazy)."""
        if self._session is None:
            raise RuntimeError("Unit of Work not started (use async with)")

        if self._trades is None:
            self._trades = SQLAlchemyTradeRepository(self._session)

        return self._trades


# Factory function для dependency injection
def create_unit_of_work(
    session_factory: async_sessionmaker[AsyncSession],
) -> SQLAlchemyUnitOfWork:
    """Factory для створення Unit of Work."""
    return SQLAlchemyUnitOfWork(session_factory)
