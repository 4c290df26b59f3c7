"""Data Transfer Objects for swaps application layer."""

from .address_dto import AddressValidationDTO
from .quote_dto import QuoteDTO
from .refresh_dto import RefreshSummaryDTO
from .trade_dto import TradeDTO

__all__ = ["AddressValidationDTO", "QuoteDTO", "RefreshSummaryDTO", "TradeDTO"]
