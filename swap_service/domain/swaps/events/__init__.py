"""Domain Events для Swaps bounded context."""

from .trade_events import (
    TradeBindingFailedEvent,
    TradeCreatedEvent,
    TradeReachedTerminalEvent,
    TradeStatusChangedEvent,
    UpstreamStatusUnrecognizedEvent,
)

__all__ = [
    "TradeCreatedEvent",
    "TradeStatusChangedEvent",
    "TradeReachedTerminalEvent",
    "UpstreamStatusUnrecognizedEvent",
    "TradeBindingFailedEvent",
]
