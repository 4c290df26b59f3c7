"""Domain <-> ORM mappers."""

from .swap_trade_mapper import SwapTradeMapper

__all__ = ["SwapTradeMapper"]
