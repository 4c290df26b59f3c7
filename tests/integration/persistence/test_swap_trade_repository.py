"""Integration tests for SQLAlchemyTradeRepository + SQLAlchemyUnitOfWork."""

from datetime import timedelta
from decimal import Decimal

import pytest

from swap_service.domain.swaps.entities import SwapTrade
from swap_service.domain.swaps.exceptions import DuplicateUpstreamId, TradeNotFound
from swap_service.domain.swaps.value_objects import TradeStatus, UpstreamTrade
from swap_service.infrastructure.persistence.sqlalchemy import SQLAlchemyUnitOfWork
from tests.fakes import T0, make_quote


def new_trade(upstream_id: str = "UP1", token: str | None = None, now=T0) -> SwapTrade:
    return SwapTrade.create_from_quote(
        quote=make_quote(token=token or f"R-{upstream_id}:changenow"),
        upstream=UpstreamTrade(
            upstream_trade_id=upstream_id,
            deposit_address="bc1qdeposit",
            deposit_extra_id="memo-7",
            amount_to=Decimal("6.1"),
        ),
        destination_address="4Ab3xmr",
        refund_address="1QxBtc",
        owner="42",
        now=now,
    )


async def insert(session_factory, trade: SwapTrade) -> None:
    async with SQLAlchemyUnitOfWork(session_factory) as uow:
        await uow.trades.insert(trade)
        await uow.commit()


class TestTradeRepository:
    """Integration tests для TradeRepository."""

    async def test_insert_and_get_by_id(self, session_factory):
        # Arrange
        trade = new_trade()

        # Act
        await insert(session_factory, trade)

        # Assert
        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            saved = await uow.trades.get_by_id(trade.trade_id)

        assert saved is not None
        assert saved.upstream_trade_id == "UP1"
        assert saved.status == TradeStatus.CREATED
        assert saved.quote_token == "R-UP1:changenow"
        assert saved.amount == Decimal("0.1")
        assert saved.quoted_rate == Decimal("61")
        assert saved.deposit_address == "bc1qdeposit"
        assert saved.deposit_extra_id == "memo-7"
        assert saved.owner == "42"
        assert saved.created_at == T0
        assert saved.created_at.tzinfo is not None

    async def test_get_by_upstream_id(self, session_factory):
        trade = new_trade("UP9")
        await insert(session_factory, trade)

        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            found = await uow.trades.get_by_upstream_id("UP9")
            missing = await uow.trades.get_by_upstream_id("nope")

        assert found is not None
        assert found.trade_id == trade.trade_id
        assert missing is None

    async def test_duplicate_upstream_id_rejected(self, session_factory):
        # Arrange
        await insert(session_factory, new_trade("UP1"))

        # Act & Assert
        with pytest.raises(DuplicateUpstreamId):
            await insert(session_factory, new_trade("UP1", token="R-other:changenow"))

    async def test_duplicate_quote_token_rejected(self, session_factory):
        await insert(session_factory, new_trade("UP1", token="R1:B"))

        with pytest.raises(DuplicateUpstreamId):
            await insert(session_factory, new_trade("UP2", token="R1:B"))

    async def test_rollback_on_exception_leaves_no_row(self, session_factory):
        trade = new_trade()

        with pytest.raises(RuntimeError):
            async with SQLAlchemyUnitOfWork(session_factory) as uow:
                await uow.trades.insert(trade)
                raise RuntimeError("boom before commit")

        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            assert await uow.trades.get_by_id(trade.trade_id) is None

    async def test_save_updates_reconciliation_state(self, session_factory):
        # Arrange
        trade = new_trade()
        await insert(session_factory, trade)

        # Act
        trade.apply_upstream_status("sending", checked_at=T0 + timedelta(minutes=5))
        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            await uow.trades.save(trade)
            await uow.commit()

        # Assert
        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            saved = await uow.trades.get_by_id(trade.trade_id)
        assert saved.status == TradeStatus.EXCHANGING
        assert saved.upstream_status == "sending"
        assert saved.last_checked_at == T0 + timedelta(minutes=5)

    async def test_save_unknown_trade_raises(self, session_factory):
        with pytest.raises(TradeNotFound):
            async with SQLAlchemyUnitOfWork(session_factory) as uow:
                await uow.trades.save(new_trade())

    async def test_update_status_is_monotonic(self, session_factory):
        # Arrange
        trade = new_trade()
        await insert(session_factory, trade)

        # Act
        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            forward = await uow.trades.update_status(
                trade.trade_id, TradeStatus.CONFIRMING, T0 + timedelta(minutes=1)
            )
            backward = await uow.trades.update_status(
                trade.trade_id, TradeStatus.WAITING_DEPOSIT, T0 + timedelta(minutes=2)
            )
            await uow.commit()

        # Assert
        assert forward is True
        assert backward is False
        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            saved = await uow.trades.get_by_id(trade.trade_id)
        assert saved.status == TradeStatus.CONFIRMING

    async def test_update_status_unknown_trade(self, session_factory):
        with pytest.raises(TradeNotFound):
            async with SQLAlchemyUnitOfWork(session_factory) as uow:
                await uow.trades.update_status("missing", TradeStatus.FAILED, T0)

    async def test_list_refresh_candidates(self, session_factory):
        # Arrange
        old = new_trade("UP1")
        old.last_checked_at = T0 - timedelta(minutes=10)
        older = new_trade("UP2")
        older.last_checked_at = T0 - timedelta(minutes=20)
        fresh = new_trade("UP3")
        fresh.last_checked_at = T0
        done = new_trade("UP4")
        done.transition_to(TradeStatus.FINISHED, checked_at=T0 - timedelta(hours=1))
        for trade in (old, older, fresh, done):
            await insert(session_factory, trade)

        # Act
        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            candidates = await uow.trades.list_refresh_candidates(
                stale_before=T0 - timedelta(minutes=1), limit=10
            )
            limited = await uow.trades.list_refresh_candidates(
                stale_before=T0 - timedelta(minutes=1), limit=1
            )

        # Assert: oldest check first, terminal and fresh excluded
        assert [t.upstream_trade_id for t in candidates] == ["UP2", "UP1"]
        assert [t.upstream_trade_id for t in limited] == ["UP2"]


class TestUnitOfWork:
    async def test_repository_requires_context(self, session_factory):
        uow = SQLAlchemyUnitOfWork(session_factory)

        with pytest.raises(RuntimeError):
            uow.trades

    async def test_uow_is_reusable_sequentially(self, session_factory):
        uow = SQLAlchemyUnitOfWork(session_factory)
        trade = new_trade()

        async with uow:
            await uow.trades.insert(trade)
            await uow.commit()
        async with uow:
            saved = await uow.trades.get_by_id(trade.trade_id)

        assert saved is not None
