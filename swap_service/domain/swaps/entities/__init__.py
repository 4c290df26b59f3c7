"""Entities для Swaps bounded context."""

from .trade import SwapTrade

__all__ = ["SwapTrade"]
