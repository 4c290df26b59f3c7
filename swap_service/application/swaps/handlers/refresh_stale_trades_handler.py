"""RefreshStaleTrades Handler - background sweep через StatusReconciler."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from swap_service.application.shared import CommandHandler, UnitOfWork
from swap_service.application.swaps.commands import RefreshStaleTradesCommand
from swap_service.application.swaps.dtos import RefreshSummaryDTO
from swap_service.application.swaps.services import StatusReconciler

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RefreshStaleTradesHandler(CommandHandler[RefreshStaleTradesCommand, RefreshSummaryDTO]):
    """Sweep: non-terminal trades з last_checked_at < now - threshold.

    Кожен trade проходить той самий serialized reconcile path, що й read
    path. Failure одного trade не зупиняє sweep.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        reconciler: StatusReconciler,
        refresh_threshold: timedelta = timedelta(seconds=30),
        batch_size: int = 50,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.uow = uow
        self.reconciler = reconciler
        self.refresh_threshold = refresh_threshold
        self.batch_size = batch_size
        self.clock = clock

    async def handle(self, command: RefreshStaleTradesCommand) -> RefreshSummaryDTO:
        limit = command.limit or self.batch_size
        stale_before = self.clock() - self.refresh_threshold

        async with self.uow:
            candidates = await self.uow.trades.list_refresh_candidates(
                stale_before=stale_before, limit=limit
            )

        summary = RefreshSummaryDTO()
        for trade in candidates:
            try:
                result = await self.reconciler.reconcile(trade.trade_id, force=True)
            except Exception as e:
                summary.failed += 1
                logger.warning(
                    "refresh_stale_trades.trade_failed",
                    extra={
                        "trade_id": trade.trade_id,
                        "error_type": type(e).__name__,
                        "error": str(e),
                    },
                )
                continue

            summary.checked += 1
            if result.changed:
                summary.changed += 1
            if result.is_stale:
                summary.stale += 1

        logger.info(
            "refresh_stale_trades.completed",
            extra={
                "candidates": len(candidates),
                "checked": summary.checked,
                "changed": summary.changed,
                "stale": summary.stale,
                "failed": summary.failed,
            },
        )
        return summary
