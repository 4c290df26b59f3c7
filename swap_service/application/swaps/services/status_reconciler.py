"""StatusReconciler - єдиний serialized шлях оновлення trade status.

Використовується read path (GetTradeStatusHandler) та background sweep
(RefreshStaleTradesHandler).

Flow для одного trade:
1. Acquire per-trade lock (process-wide KeyedLock)
2. Read trade; terminal або fresh → return без upstream call
3. Poll upstream (поза транзакцією)
4. В транзакції: re-read FOR UPDATE → apply transition → save → commit
   (retried на persistence failure)
5. Publish domain events після commit
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from swap_service.application.shared import UnitOfWork
from swap_service.domain.shared import DomainException
from swap_service.domain.swaps.entities import SwapTrade
from swap_service.domain.swaps.exceptions import TradeNotFound, TradeStoreUnavailable
from swap_service.domain.swaps.ports import AggregatorPort
from swap_service.domain.swaps.value_objects import UpstreamTradeStatus
from swap_service.infrastructure.locking import KeyedLock
from swap_service.infrastructure.messaging import EventBus

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ReconcileResult:
    trade: SwapTrade
    refreshed: bool = False
    """Upstream був опитаний."""

    changed: bool = False
    """Status змінився і збережений."""

    is_stale: bool = False
    """Persistence exhausted - trade є last-known record."""


class StatusReconciler:
    """Reconcile local trade status з upstream.

    Example:
        >>> reconciler = StatusReconciler(uow, aggregator, event_bus, locks)
        >>> result = await reconciler.reconcile(trade_id)
        >>> result.trade.status  # TradeStatus.CONFIRMING
    """

    def __init__(
        self,
        uow: UnitOfWork,
        aggregator: AggregatorPort,
        event_bus: EventBus,
        locks: KeyedLock,
        refresh_threshold: timedelta = timedelta(seconds=30),
        deposit_window: timedelta | None = None,
        persistence_max_retries: int = 3,
        persistence_retry_delay: float = 0.2,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize reconciler.

        Args:
            uow: Unit of Work (один transaction за раз).
            aggregator: Aggregator port для status polls.
            event_bus: Event bus для publishing domain events.
            locks: Per-trade lock registry.
            refresh_threshold: Мінімальний вік last_checked_at для re-poll.
            deposit_window: Local EXPIRED inference (None → trust upstream).
            persistence_max_retries: Спроби persist перед is_stale.
            persistence_retry_delay: Base delay між спробами (linear).
            clock: Time source (tests).
        """
        self.uow = uow
        self.aggregator = aggregator
        self.event_bus = event_bus
        self.locks = locks
        self.refresh_threshold = refresh_threshold
        self.deposit_window = deposit_window
        self.persistence_max_retries = persistence_max_retries
        self.persistence_retry_delay = persistence_retry_delay
        self.clock = clock

    async def reconcile(self, trade_id: str, force: bool = False) -> ReconcileResult:
        """Refresh trade якщо потрібно.

        Args:
            trade_id: Local trade ID.
            force: Ігнорувати refresh threshold (sweep вже відфільтрував).

        Returns:
            ReconcileResult з current view.

        Raises:
            TradeNotFound: Unknown trade_id.
            UpstreamUnavailable: Status poll failed після retries.
            TradeStoreUnavailable: Initial read failed після retries.
        """
        async with self.locks.acquire(trade_id):
            trade = await self._load_with_retry(trade_id)

            if trade is None:
                raise TradeNotFound("Trade not found", trade_id=trade_id)

            if trade.is_terminal:
                return ReconcileResult(trade=trade)

            now = self.clock()
            if not force and not trade.needs_refresh(self.refresh_threshold, now):
                return ReconcileResult(trade=trade)

            upstream = await self.aggregator.get_trade_status(trade.upstream_trade_id)

            logger.debug(
                "reconcile.upstream_polled",
                extra={
                    "trade_id": trade_id,
                    "upstream_status": upstream.status,
                    "stored_status": trade.status.value,
                },
            )

            return await self._apply_with_retry(trade, upstream, checked_at=self.clock())

    async def _load_with_retry(self, trade_id: str) -> SwapTrade | None:
        last_error: Exception | None = None

        for attempt in range(1, self.persistence_max_retries + 1):
            try:
                async with self.uow:
                    return await self.uow.trades.get_by_id(trade_id)
            except DomainException:
                raise
            except Exception as e:
                last_error = e
                logger.warning(
                    "reconcile.load_failed",
                    extra={
                        "trade_id": trade_id,
                        "attempt": attempt,
                        "max_retries": self.persistence_max_retries,
                        "error": str(e),
                    },
                )
                if attempt < self.persistence_max_retries:
                    await asyncio.sleep(self.persistence_retry_delay * attempt)

        raise TradeStoreUnavailable(
            "Trade store unavailable", trade_id=trade_id, error=str(last_error)
        )

    async def _apply_with_retry(
        self,
        last_known: SwapTrade,
        upstream: UpstreamTradeStatus,
        checked_at: datetime,
    ) -> ReconcileResult:
        last_error: Exception | None = None

        for attempt in range(1, self.persistence_max_retries + 1):
            try:
                async with self.uow:
                    trade = await self.uow.trades.get_by_id(
                        last_known.trade_id, for_update=True
                    )
                    if trade is None:
                        raise TradeNotFound("Trade not found", trade_id=last_known.trade_id)

                    previous = trade.status
                    changed = trade.apply_upstream_status(
                        upstream.status, checked_at=checked_at, amount_to=upstream.amount_to
                    )
                    if self.deposit_window is not None:
                        changed = (
                            trade.expire_if_deposit_window_elapsed(
                                self.deposit_window, now=checked_at
                            )
                            or changed
                        )

                    await self.uow.trades.save(trade)
                    await self.uow.commit()

            except DomainException:
                raise
            except Exception as e:
                last_error = e
                logger.warning(
                    "reconcile.persistence_failed",
                    extra={
                        "trade_id": last_known.trade_id,
                        "attempt": attempt,
                        "max_retries": self.persistence_max_retries,
                        "error": str(e),
                    },
                )
                if attempt < self.persistence_max_retries:
                    await asyncio.sleep(self.persistence_retry_delay * attempt)
                continue

            if changed:
                logger.info(
                    "reconcile.status_changed",
                    extra={
                        "trade_id": trade.trade_id,
                        "from_status": previous.value,
                        "to_status": trade.status.value,
                        "upstream_status": upstream.status,
                    },
                )

            await self.event_bus.publish_all(trade.get_domain_events())
            trade.clear_domain_events()

            return ReconcileResult(trade=trade, refreshed=True, changed=changed)

        logger.error(
            "reconcile.persistence_exhausted",
            extra={
                "trade_id": last_known.trade_id,
                "upstream_status": upstream.status,
                "error": str(last_error),
            },
        )
        return ReconcileResult(trade=last_known, refreshed=True, is_stale=True)
