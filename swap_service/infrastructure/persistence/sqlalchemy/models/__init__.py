"""SQLAlchemy ORM models."""

from .base import Base
from .swap_trade_model import SwapTradeModel

__all__ = ["Base", "SwapTradeModel"]
