"""Pydantic schemas for API v1."""

from .swap_schemas import (
    AddressValidationResponse,
    CreateTradeRequest,
    ErrorResponse,
    QuoteResponse,
    RatesResponse,
    TradeResponse,
    ValidateAddressRequest,
)

__all__ = [
    "AddressValidationResponse",
    "CreateTradeRequest",
    "ErrorResponse",
    "QuoteResponse",
    "RatesResponse",
    "TradeResponse",
    "ValidateAddressRequest",
]
