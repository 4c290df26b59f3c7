"""Exceptions для Swaps bounded context."""

from .swap_exceptions import (
    DuplicateUpstreamId,
    InvalidAddress,
    NoRoute,
    QuoteAlreadyUsed,
    QuoteExpired,
    QuoteNotFound,
    SwapError,
    TradeNotFound,
    TradePersistenceFailed,
    TradeStoreUnavailable,
    UpstreamRejected,
    UpstreamUnavailable,
    ValidationUnavailable,
)

__all__ = [
    "SwapError",
    "ValidationUnavailable",
    "InvalidAddress",
    "NoRoute",
    "UpstreamUnavailable",
    "QuoteExpired",
    "QuoteNotFound",
    "QuoteAlreadyUsed",
    "UpstreamRejected",
    "DuplicateUpstreamId",
    "TradeNotFound",
    "TradePersistenceFailed",
    "TradeStoreUnavailable",
]
