"""Unit tests для StatusReconciler, GetTradeStatusHandler, RefreshStaleTradesHandler."""

import asyncio
from datetime import timedelta

import pytest

from swap_service.application.swaps.commands import RefreshStaleTradesCommand
from swap_service.application.swaps.handlers import (
    GetTradeStatusHandler,
    RefreshStaleTradesHandler,
)
from swap_service.application.swaps.queries import GetTradeStatusQuery
from swap_service.application.swaps.services import StatusReconciler
from swap_service.domain.swaps.events import TradeReachedTerminalEvent
from swap_service.domain.swaps.exceptions import (
    TradeNotFound,
    TradeStoreUnavailable,
    UpstreamUnavailable,
)
from swap_service.domain.swaps.value_objects import TradeStatus
from swap_service.infrastructure.persistence.sqlalchemy import SQLAlchemyUnitOfWork
from tests.fakes import (
    T0,
    FakeAggregator,
    FlakyReadUnitOfWork,
    FlakyUnitOfWork,
    load,
    seed_trade,
)

THRESHOLD = timedelta(seconds=30)


def build_reconciler(uow, aggregator, event_bus, locks, clock, **kwargs) -> StatusReconciler:
    return StatusReconciler(
        uow=uow,
        aggregator=aggregator,
        event_bus=event_bus,
        locks=locks,
        refresh_threshold=THRESHOLD,
        persistence_max_retries=3,
        persistence_retry_delay=0,
        clock=clock,
        **kwargs,
    )


@pytest.fixture
def reconciler(session_factory, aggregator, event_bus, locks, clock) -> StatusReconciler:
    return build_reconciler(
        SQLAlchemyUnitOfWork(session_factory), aggregator, event_bus, locks, clock
    )


class TestReconcile:
    async def test_fresh_trade_not_polled(self, reconciler, session_factory, aggregator, clock):
        trade = await seed_trade(session_factory)
        clock.advance(seconds=10)

        result = await reconciler.reconcile(trade.trade_id)

        assert result.refreshed is False
        assert aggregator.status_calls == []

    async def test_stale_trade_polled_and_advanced(
        self, reconciler, session_factory, aggregator, clock
    ):
        # Arrange
        trade = await seed_trade(session_factory)
        aggregator.statuses["UP1"] = "confirming"
        now = clock.advance(seconds=60)

        # Act
        result = await reconciler.reconcile(trade.trade_id)

        # Assert
        assert result.refreshed is True
        assert result.changed is True
        assert result.trade.status == TradeStatus.CONFIRMING
        stored = await load(session_factory, trade.trade_id)
        assert stored.status == TradeStatus.CONFIRMING
        assert stored.upstream_status == "confirming"
        assert stored.last_checked_at == now

    async def test_upstream_regression_ignored(self, reconciler, session_factory, aggregator, clock):
        """Upstream: confirming, потім waiting → stored лишається CONFIRMING."""
        trade = await seed_trade(session_factory)
        aggregator.statuses["UP1"] = "confirming"
        clock.advance(seconds=60)
        await reconciler.reconcile(trade.trade_id)

        aggregator.statuses["UP1"] = "waiting"
        clock.advance(seconds=60)
        result = await reconciler.reconcile(trade.trade_id)

        assert result.changed is False
        assert (await load(session_factory, trade.trade_id)).status == TradeStatus.CONFIRMING

    async def test_terminal_trade_never_polled(
        self, reconciler, session_factory, aggregator, clock
    ):
        trade = await seed_trade(session_factory, status=TradeStatus.FINISHED)
        clock.advance(days=1)

        result = await reconciler.reconcile(trade.trade_id, force=True)

        assert result.trade.status == TradeStatus.FINISHED
        assert aggregator.status_calls == []

    async def test_unrecognized_upstream_status_keeps_stored(
        self, reconciler, session_factory, aggregator, clock
    ):
        trade = await seed_trade(session_factory, status=TradeStatus.WAITING_DEPOSIT)
        aggregator.statuses["UP1"] = "paid_partially"
        clock.advance(seconds=60)

        result = await reconciler.reconcile(trade.trade_id)

        assert result.changed is False
        stored = await load(session_factory, trade.trade_id)
        assert stored.status == TradeStatus.WAITING_DEPOSIT
        assert stored.upstream_status == "paid_partially"

    async def test_terminal_event_published(
        self, reconciler, session_factory, aggregator, event_bus, clock
    ):
        received = []

        async def on_terminal(event):
            received.append(event)

        event_bus.subscribe(TradeReachedTerminalEvent, on_terminal)
        trade = await seed_trade(session_factory)
        aggregator.statuses["UP1"] = "finished"
        clock.advance(seconds=60)

        await reconciler.reconcile(trade.trade_id)

        assert [e.trade_id for e in received] == [trade.trade_id]

    async def test_unknown_trade(self, reconciler):
        with pytest.raises(TradeNotFound):
            await reconciler.reconcile("00000000-0000-0000-0000-000000000000")

    async def test_upstream_unavailable_surfaces(
        self, reconciler, session_factory, aggregator, clock
    ):
        trade = await seed_trade(session_factory)
        aggregator.status_error = UpstreamUnavailable("Aggregator unavailable")
        clock.advance(seconds=60)

        with pytest.raises(UpstreamUnavailable):
            await reconciler.reconcile(trade.trade_id)

    async def test_persistence_exhaustion_returns_last_known_as_stale(
        self, session_factory, aggregator, event_bus, locks, clock
    ):
        # Arrange
        trade = await seed_trade(session_factory)
        aggregator.statuses["UP1"] = "confirming"
        clock.advance(seconds=60)
        uow = FlakyUnitOfWork(session_factory, fail_before_commit=10)
        reconciler = build_reconciler(uow, aggregator, event_bus, locks, clock)

        # Act
        result = await reconciler.reconcile(trade.trade_id)

        # Assert
        assert result.is_stale is True
        assert result.trade.status == TradeStatus.CREATED
        assert uow.commit_attempts == 3
        assert (await load(session_factory, trade.trade_id)).status == TradeStatus.CREATED

    async def test_transient_persistence_failure_retried(
        self, session_factory, aggregator, event_bus, locks, clock
    ):
        trade = await seed_trade(session_factory)
        aggregator.statuses["UP1"] = "confirming"
        clock.advance(seconds=60)
        uow = FlakyUnitOfWork(session_factory, fail_before_commit=1)
        reconciler = build_reconciler(uow, aggregator, event_bus, locks, clock)

        result = await reconciler.reconcile(trade.trade_id)

        assert result.is_stale is False
        assert (await load(session_factory, trade.trade_id)).status == TradeStatus.CONFIRMING
        assert len(aggregator.status_calls) == 1

    async def test_transient_read_failure_retried(
        self, session_factory, aggregator, event_bus, locks, clock
    ):
        trade = await seed_trade(session_factory)
        aggregator.statuses["UP1"] = "confirming"
        clock.advance(seconds=60)
        uow = FlakyReadUnitOfWork(session_factory, fail_reads=1)
        reconciler = build_reconciler(uow, aggregator, event_bus, locks, clock)

        result = await reconciler.reconcile(trade.trade_id)

        assert result.trade.status == TradeStatus.CONFIRMING
        assert uow.fail_reads == 0

    async def test_exhausted_reads_raise_store_unavailable(
        self, session_factory, aggregator, event_bus, locks, clock
    ):
        trade = await seed_trade(session_factory)
        uow = FlakyReadUnitOfWork(session_factory, fail_reads=3)
        reconciler = build_reconciler(uow, aggregator, event_bus, locks, clock)

        with pytest.raises(TradeStoreUnavailable):
            await reconciler.reconcile(trade.trade_id, force=True)

        assert aggregator.status_calls == []


class SlowStatusAggregator(FakeAggregator):
    """Status poll yields to the event loop, recording enter/exit."""

    def __init__(self) -> None:
        super().__init__()
        self.events: list[str] = []

    async def get_trade_status(self, upstream_trade_id: str):
        self.events.append("enter")
        await asyncio.sleep(0.01)
        self.events.append("exit")
        return await super().get_trade_status(upstream_trade_id)


class TestConcurrentReconcile:
    async def test_same_trade_reconciles_do_not_interleave(
        self, session_factory, event_bus, locks, clock
    ):
        # Arrange: two reconcilers (як два requests) зі спільним lock registry
        trade = await seed_trade(session_factory)
        aggregator = SlowStatusAggregator()
        aggregator.statuses["UP1"] = "confirming"
        first, second = (
            build_reconciler(
                SQLAlchemyUnitOfWork(session_factory), aggregator, event_bus, locks, clock
            )
            for _ in range(2)
        )

        # Act
        results = await asyncio.gather(
            first.reconcile(trade.trade_id, force=True),
            second.reconcile(trade.trade_id, force=True),
        )

        # Assert
        assert aggregator.events == ["enter", "exit", "enter", "exit"]
        assert sorted(r.changed for r in results) == [False, True]
        assert (await load(session_factory, trade.trade_id)).status == TradeStatus.CONFIRMING


class TestDepositWindowInference:
    async def test_expired_locally_when_window_elapsed(
        self, session_factory, aggregator, event_bus, locks, clock
    ):
        trade = await seed_trade(session_factory, status=TradeStatus.WAITING_DEPOSIT)
        aggregator.statuses["UP1"] = "waiting"
        clock.advance(minutes=61)
        reconciler = build_reconciler(
            SQLAlchemyUnitOfWork(session_factory),
            aggregator,
            event_bus,
            locks,
            clock,
            deposit_window=timedelta(minutes=60),
        )

        result = await reconciler.reconcile(trade.trade_id)

        assert result.changed is True
        assert (await load(session_factory, trade.trade_id)).status == TradeStatus.EXPIRED

    async def test_without_window_upstream_is_trusted(
        self, reconciler, session_factory, aggregator, clock
    ):
        trade = await seed_trade(session_factory, status=TradeStatus.WAITING_DEPOSIT)
        aggregator.statuses["UP1"] = "waiting"
        clock.advance(days=2)

        await reconciler.reconcile(trade.trade_id)

        assert (await load(session_factory, trade.trade_id)).status == TradeStatus.WAITING_DEPOSIT


class TestGetTradeStatusHandler:
    async def test_returns_refreshed_view(self, reconciler, session_factory, aggregator, clock):
        trade = await seed_trade(session_factory)
        aggregator.statuses["UP1"] = "exchanging"
        clock.advance(seconds=60)
        handler = GetTradeStatusHandler(reconciler)

        dto = await handler.handle(GetTradeStatusQuery(trade_id=trade.trade_id))

        assert dto.trade_id == trade.trade_id
        assert dto.status == "exchanging"
        assert dto.is_stale is False

    async def test_stale_flag_propagated(
        self, session_factory, aggregator, event_bus, locks, clock
    ):
        trade = await seed_trade(session_factory)
        aggregator.statuses["UP1"] = "exchanging"
        clock.advance(seconds=60)
        uow = FlakyUnitOfWork(session_factory, fail_before_commit=10)
        handler = GetTradeStatusHandler(
            build_reconciler(uow, aggregator, event_bus, locks, clock)
        )

        dto = await handler.handle(GetTradeStatusQuery(trade_id=trade.trade_id))

        assert dto.status == "created"
        assert dto.is_stale is True


class TestRefreshStaleTradesHandler:
    @pytest.fixture
    def sweep(self, session_factory, reconciler, clock) -> RefreshStaleTradesHandler:
        return RefreshStaleTradesHandler(
            uow=SQLAlchemyUnitOfWork(session_factory),
            reconciler=reconciler,
            refresh_threshold=THRESHOLD,
            batch_size=50,
            clock=clock,
        )

    async def test_only_stale_active_trades_polled(
        self, sweep, session_factory, aggregator, clock
    ):
        # Arrange
        stale = await seed_trade(session_factory, upstream_id="UP1", checked_at=T0)
        await seed_trade(
            session_factory, upstream_id="UP2", checked_at=T0 + timedelta(seconds=50)
        )
        await seed_trade(session_factory, upstream_id="UP3", status=TradeStatus.REFUNDED)
        aggregator.statuses["UP1"] = "confirming"
        clock.advance(seconds=60)

        # Act
        summary = await sweep.handle(RefreshStaleTradesCommand())

        # Assert
        assert aggregator.status_calls == ["UP1"]
        assert summary.checked == 1
        assert summary.changed == 1
        assert (await load(session_factory, stale.trade_id)).status == TradeStatus.CONFIRMING

    async def test_limit_respected(self, sweep, session_factory, aggregator, clock):
        for i in range(3):
            await seed_trade(
                session_factory, upstream_id=f"UP{i}", checked_at=T0 + timedelta(seconds=i)
            )
        clock.advance(seconds=120)

        summary = await sweep.handle(RefreshStaleTradesCommand(limit=2))

        assert summary.checked == 2
        assert aggregator.status_calls == ["UP0", "UP1"]

    async def test_upstream_failure_counted_and_sweep_continues(
        self, sweep, session_factory, aggregator, clock
    ):
        await seed_trade(session_factory, upstream_id="UP1")
        await seed_trade(session_factory, upstream_id="UP2", checked_at=T0 + timedelta(seconds=1))
        aggregator.status_error = UpstreamUnavailable("Aggregator unavailable")
        clock.advance(seconds=60)

        summary = await sweep.handle(RefreshStaleTradesCommand())

        assert summary.failed == 2
        assert summary.checked == 0
        assert len(aggregator.status_calls) == 2

    async def test_unexpected_error_counted_and_sweep_continues(
        self, sweep, session_factory, aggregator, clock
    ):
        await seed_trade(session_factory, upstream_id="UP1")
        await seed_trade(session_factory, upstream_id="UP2", checked_at=T0 + timedelta(seconds=1))
        aggregator.status_error = RuntimeError("unexpected payload")
        clock.advance(seconds=60)

        summary = await sweep.handle(RefreshStaleTradesCommand())

        assert summary.failed == 2
        assert aggregator.status_calls == ["UP1", "UP2"]

    async def test_store_failure_on_one_trade_does_not_abort_batch(
        self, session_factory, aggregator, event_bus, locks, clock
    ):
        # Arrange: reads for the first trade keep failing
        await seed_trade(session_factory, upstream_id="UP1")
        second = await seed_trade(
            session_factory, upstream_id="UP2", checked_at=T0 + timedelta(seconds=1)
        )
        aggregator.statuses["UP2"] = "confirming"
        clock.advance(seconds=60)
        reconciler = build_reconciler(
            FlakyReadUnitOfWork(session_factory, fail_reads=3),
            aggregator,
            event_bus,
            locks,
            clock,
        )
        sweep = RefreshStaleTradesHandler(
            uow=SQLAlchemyUnitOfWork(session_factory),
            reconciler=reconciler,
            refresh_threshold=THRESHOLD,
            clock=clock,
        )

        # Act
        summary = await sweep.handle(RefreshStaleTradesCommand())

        # Assert
        assert summary.failed == 1
        assert summary.checked == 1
        assert aggregator.status_calls == ["UP2"]
        assert (await load(session_factory, second.trade_id)).status == TradeStatus.CONFIRMING
