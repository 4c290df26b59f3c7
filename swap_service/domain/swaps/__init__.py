"""Swaps Bounded Context - Domain Layer.

Exports:
    Entities: SwapTrade (Aggregate Root)
    Value Objects: TradeStatus, RateType, Quote, AddressVerdict, RateOffer,
        UpstreamTrade, UpstreamTradeStatus, Owner
    Exceptions: SwapError + taxonomy (QuoteExpired, InvalidAddress, ...)
    Events: TradeCreatedEvent, TradeStatusChangedEvent, ...
    Repositories: TradeRepository (interface)
    Ports: AggregatorPort, QuoteCache (interfaces)
"""

# Entities (Aggregate Roots)
from .entities import SwapTrade

# Value Objects
from .value_objects import (
    ANONYMOUS_OWNER,
    AddressVerdict,
    Quote,
    RateOffer,
    RateType,
    TradeStatus,
    UpstreamTrade,
    UpstreamTradeStatus,
    translate_upstream_status,
)

# Exceptions
from .exceptions import (
    DuplicateUpstreamId,
    InvalidAddress,
    NoRoute,
    QuoteAlreadyUsed,
    QuoteExpired,
    QuoteNotFound,
    SwapError,
    TradeNotFound,
    TradePersistenceFailed,
    UpstreamRejected,
    UpstreamUnavailable,
    ValidationUnavailable,
)

# Events
from .events import (
    TradeBindingFailedEvent,
    TradeCreatedEvent,
    TradeReachedTerminalEvent,
    TradeStatusChangedEvent,
    UpstreamStatusUnrecognizedEvent,
)

# Repository interfaces / ports
from .ports import AggregatorPort, QuoteCache
from .repositories import TradeRepository

__all__ = [
    # Entities
    "SwapTrade",
    # Value Objects
    "ANONYMOUS_OWNER",
    "AddressVerdict",
    "Quote",
    "RateOffer",
    "RateType",
    "TradeStatus",
    "UpstreamTrade",
    "UpstreamTradeStatus",
    "translate_upstream_status",
    # Exceptions
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
    # Events
    "TradeCreatedEvent",
    "TradeStatusChangedEvent",
    "TradeReachedTerminalEvent",
    "UpstreamStatusUnrecognizedEvent",
    "TradeBindingFailedEvent",
    # Repositories / ports
    "TradeRepository",
    "AggregatorPort",
    "QuoteCache",
]
