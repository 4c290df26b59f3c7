"""SQLAlchemy implementation of TradeRepository (Trade Store)."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from swap_service.domain.swaps.entities import SwapTrade
from swap_service.domain.swaps.exceptions import DuplicateUpstreamId, TradeNotFound
from swap_service.domain.swaps.repositories import TradeRepository as TradeRepositoryPort
from swap_service.domain.swaps.value_objects import TradeStatus
from swap_service.domain.swaps.value_objects.enums import ACTIVE_STATUSES
from swap_service.infrastructure.persistence.sqlalchemy.mappers import SwapTradeMapper
from swap_service.infrastructure.persistence.sqlalchemy.models import SwapTradeModel

logger = logging.getLogger(__name__)


class SQLAlchemyTradeRepository(TradeRepositoryPort):
    """SQLAlchemy implementation of TradeRepository port.

    Example:
        >>> async with session_factory() as session:
        ...     repo = SQLAlchemyTradeRepository(session)
        ...     await repo.insert(trade)
        ...     await session.commit()
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session
        self._mapper = SwapTradeMapper()

    async def insert(self, trade: SwapTrade) -> None:
        """INSERT new trade.

        Raises:
            DuplicateUpstreamId: Unique violation (upstream_trade_id / quote_token).
        """
        model = self._mapper.to_model(trade)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as e:
            logger.warning(
                "trade_repository.duplicate_upstream_id",
                extra={
                    "trade_id": trade.trade_id,
                    "upstream_trade_id": trade.upstream_trade_id,
                },
            )
            raise DuplicateUpstreamId(
                "Upstream trade already recorded",
                upstream_trade_id=trade.upstream_trade_id,
            ) from e

    async def get_by_id(
        self, trade_id: str, for_update: bool = False
    ) -> Optional[SwapTrade]:
        """Get trade by ID (optionally locking the row)."""
        model = await self._load(trade_id, for_update=for_update)
        if model is None:
            return None
        return self._mapper.to_entity(model)

    async def get_by_upstream_id(self, upstream_trade_id: str) -> Optional[SwapTrade]:
        stmt = select(SwapTradeModel).where(
            SwapTradeModel.upstream_trade_id == upstream_trade_id
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return self._mapper.to_entity(model)

    async def save(self, trade: SwapTrade) -> None:
        """UPDATE reconciliation state існуючого trade.

        Raises:
            TradeNotFound: Row не існує.
        """
        model = await self._load(trade.trade_id, for_update=True)
        if model is None:
            raise TradeNotFound("Trade not found", trade_id=trade.trade_id)

        self._mapper.update_model_from_entity(model, trade)
        await self._session.flush()

    async def update_status(
        self, trade_id: str, new_status: TradeStatus, checked_at: datetime
    ) -> bool:
        """Re-read row FOR UPDATE, apply monotonic transition, write back.

        Returns:
            True якщо status змінився; False для illegal/same-state (no-op).
        """
        model = await self._load(trade_id, for_update=True)
        if model is None:
            raise TradeNotFound("Trade not found", trade_id=trade_id)

        trade = self._mapper.to_entity(model)
        changed = trade.transition_to(new_status, checked_at=checked_at)
        self._mapper.update_model_from_entity(model, trade)
        await self._session.flush()
        return changed

    async def list_refresh_candidates(
        self, stale_before: datetime, limit: int = 100
    ) -> list[SwapTrade]:
        """Non-terminal trades, oldest check first."""
        stmt = (
            select(SwapTradeModel)
            .where(SwapTradeModel.status.in_([s.value for s in ACTIVE_STATUSES]))
            .where(SwapTradeModel.last_checked_at < stale_before)
            .order_by(SwapTradeModel.last_checked_at.asc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._mapper.to_entity(model) for model in result.scalars().all()]

    async def _load(
        self, trade_id: str, for_update: bool = False
    ) -> Optional[SwapTradeModel]:
        stmt = select(SwapTradeModel).where(SwapTradeModel.trade_id == trade_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()
