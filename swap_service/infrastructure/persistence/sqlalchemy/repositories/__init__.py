"""SQLAlchemy repository implementations."""

from .swap_trade_repository import SQLAlchemyTradeRepository

__all__ = ["SQLAlchemyTradeRepository"]
