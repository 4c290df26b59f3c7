"""Swap command/query handlers."""

from .create_trade_handler import CreateTradeHandler
from .get_rates_handler import GetRatesHandler
from .get_trade_status_handler import GetTradeStatusHandler
from .refresh_stale_trades_handler import RefreshStaleTradesHandler
from .validate_address_handler import ValidateAddressHandler

__all__ = [
    "CreateTradeHandler",
    "GetRatesHandler",
    "GetTradeStatusHandler",
    "RefreshStaleTradesHandler",
    "ValidateAddressHandler",
]
