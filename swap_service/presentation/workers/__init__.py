"""Background workers (Celery).

Usage:
    celery -A swap_service.presentation.workers worker --beat --loglevel=info
"""

from .celery_app import celery_app

__all__ = ["celery_app"]
