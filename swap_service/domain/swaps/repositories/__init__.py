"""Repository interfaces для Swaps bounded context."""

from .trade_repository import TradeRepository

__all__ = ["TradeRepository"]
