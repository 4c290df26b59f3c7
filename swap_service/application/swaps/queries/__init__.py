"""Swap queries (read operations)."""

from .get_rates import GetRatesQuery
from .get_trade_status import GetTradeStatusQuery
from .validate_address import ValidateAddressQuery

__all__ = ["GetRatesQuery", "GetTradeStatusQuery", "ValidateAddressQuery"]
