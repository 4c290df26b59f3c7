"""Celery Application Configuration.

Celery setup with:
- Redis broker and result backend
- Beat scheduler for the status reconciliation sweep

Usage:
    # Start worker
    celery -A swap_service.presentation.workers worker --loglevel=info

    # Start beat scheduler
    celery -A swap_service.presentation.workers beat --loglevel=info
"""

from celery import Celery

from swap_service.config import get_settings

settings = get_settings()

celery_app = Celery(
    "swap_workers",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "swap_service.presentation.workers.tasks.trade_tasks",
    ],
)

celery_app.conf.update(
    # ==================== Task Settings ====================
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task execution
    task_acks_late=settings.celery_task_acks_late,
    task_reject_on_worker_lost=settings.celery_task_reject_on_worker_lost,
    task_time_limit=300,
    task_soft_time_limit=240,

    result_expires=3600,

    # ==================== Worker Settings ====================
    worker_prefetch_multiplier=1,
    worker_concurrency=settings.celery_worker_concurrency,
    worker_max_tasks_per_child=1000,

    # ==================== Broker Settings ====================
    broker_connection_retry_on_startup=True,
    broker_connection_max_retries=10,

    # ==================== Beat Scheduler ====================
    beat_schedule={
        "refresh-stale-trades": {
            "task": "swap_service.presentation.workers.tasks.trade_tasks.refresh_stale_trades",
            "schedule": settings.status_sweep_interval,
            "kwargs": {"limit": settings.status_sweep_batch_size},
        },
    },

    task_routes={
        "swap_service.presentation.workers.tasks.trade_tasks.*": {"queue": "trades"},
    },

    task_default_queue="default",
)

# Sweep перекривається сам з собою, якщо beat interval < тривалість sweep
celery_app.conf.task_annotations = {
    "swap_service.presentation.workers.tasks.trade_tasks.refresh_stale_trades": {
        "rate_limit": "2/m",
    },
}
