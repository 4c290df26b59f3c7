"""Trade reconciliation Celery tasks.

Тонка обгортка навколо RefreshStaleTradesHandler.

Architecture:
    Celery Beat → refresh_stale_trades → RefreshStaleTradesHandler
                                       → StatusReconciler → Repository
"""

import asyncio
import logging
from functools import wraps
from typing import Any

from celery import shared_task
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from swap_service.application.swaps.commands import RefreshStaleTradesCommand
from swap_service.application.swaps.handlers import RefreshStaleTradesHandler
from swap_service.application.swaps.services import StatusReconciler
from swap_service.config import get_settings
from swap_service.infrastructure.aggregator import create_aggregator
from swap_service.infrastructure.locking import get_trade_locks
from swap_service.infrastructure.messaging import get_event_bus, register_default_subscribers
from swap_service.infrastructure.persistence.sqlalchemy import (
    SQLAlchemyUnitOfWork,
    create_engine,
    create_session_factory,
)

logger = logging.getLogger(__name__)

_subscribers_registered = False


def async_task(f):
    """Decorator to run async function in Celery task."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            return loop.run_until_complete(f(*args, **kwargs))
        finally:
            loop.close()
    return wrapper


async def run_refresh(
    session_factory: async_sessionmaker[AsyncSession],
    limit: int | None = None,
) -> dict[str, Any]:
    """Один sweep: build handler graph → handle → close aggregator."""
    global _subscribers_registered
    settings = get_settings()

    event_bus = get_event_bus()
    if not _subscribers_registered:
        register_default_subscribers(event_bus)
        _subscribers_registered = True

    # Новий adapter на кожен sweep: httpx client прив'язаний до event loop
    aggregator = create_aggregator(settings)
    uow = SQLAlchemyUnitOfWork(session_factory)
    reconciler = StatusReconciler(
        uow=uow,
        aggregator=aggregator,
        event_bus=event_bus,
        locks=get_trade_locks(),
        refresh_threshold=settings.status_refresh_threshold,
        deposit_window=settings.deposit_window,
        persistence_max_retries=settings.persistence_max_retries,
        persistence_retry_delay=settings.persistence_retry_delay,
    )
    handler = RefreshStaleTradesHandler(
        uow=uow,
        reconciler=reconciler,
        refresh_threshold=settings.status_refresh_threshold,
        batch_size=settings.status_sweep_batch_size,
    )

    try:
        summary = await handler.handle(RefreshStaleTradesCommand(limit=limit))
    finally:
        await aggregator.close()

    return {
        "checked": summary.checked,
        "changed": summary.changed,
        "stale": summary.stale,
        "failed": summary.failed,
    }


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_jitter=True,
)
@async_task
async def refresh_stale_trades(self, limit: int | None = None) -> dict[str, Any]:
    """Reconcile non-terminal trades чий status не перевірявся довше threshold.

    Example:
        >>> refresh_stale_trades.delay(limit=50)
    """
    # Engine pool прив'язаний до loop, який async_task закриває після task
    engine = create_engine(get_settings())
    try:
        result = await run_refresh(create_session_factory(engine), limit=limit)
    finally:
        await engine.dispose()

    logger.info("task.refresh_stale_trades.completed", extra=result)
    return result
