"""Swap commands (write operations)."""

from .create_trade import CreateTradeCommand
from .refresh_stale_trades import RefreshStaleTradesCommand

__all__ = ["CreateTradeCommand", "RefreshStaleTradesCommand"]
