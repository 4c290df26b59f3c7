"""API v1 routes."""

from .swap import router as swap_router

__all__ = ["swap_router"]
