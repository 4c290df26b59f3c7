"""Default event subscribers: audit log для lifecycle events.

TradeBindingFailedEvent логується як critical - upstream trade існує без
local record і потребує ручного binding.
"""

import logging

from swap_service.domain.swaps.events import (
    TradeBindingFailedEvent,
    TradeCreatedEvent,
    TradeReachedTerminalEvent,
    TradeStatusChangedEvent,
    UpstreamStatusUnrecognizedEvent,
)

from .event_bus import EventBus

logger = logging.getLogger("swap_service.audit")


async def log_trade_created(event: TradeCreatedEvent) -> None:
    logger.info(
        "trade.created",
        extra={
            "trade_id": event.trade_id,
            "upstream_trade_id": event.upstream_trade_id,
            "owner": event.owner,
            "provider": event.provider,
            "pair": f"{event.from_asset}->{event.to_asset}",
            "amount": str(event.amount),
        },
    )


async def log_status_changed(event: TradeStatusChangedEvent) -> None:
    logger.info(
        "trade.status_changed",
        extra={
            "trade_id": event.trade_id,
            "from_status": event.from_status,
            "to_status": event.to_status,
            "upstream_status": event.upstream_status,
        },
    )


async def log_terminal(event: TradeReachedTerminalEvent) -> None:
    logger.info(
        "trade.terminal",
        extra={"trade_id": event.trade_id, "owner": event.owner, "status": event.status},
    )


async def log_unrecognized_status(event: UpstreamStatusUnrecognizedEvent) -> None:
    logger.warning(
        "trade.upstream_status_unrecognized",
        extra={
            "trade_id": event.trade_id,
            "upstream_trade_id": event.upstream_trade_id,
            "upstream_status": event.upstream_status,
        },
    )


async def log_binding_failed(event: TradeBindingFailedEvent) -> None:
    logger.critical(
        "trade.binding_failed",
        extra={
            "upstream_trade_id": event.upstream_trade_id,
            "quote_token": event.quote_token,
            "deposit_address": event.deposit_address,
            "owner": event.owner,
            "reason": event.reason,
        },
    )


def register_default_subscribers(event_bus: EventBus) -> None:
    """Subscribe audit loggers (call once at startup)."""
    event_bus.subscribe(TradeCreatedEvent, log_trade_created)
    event_bus.subscribe(TradeStatusChangedEvent, log_status_changed)
    event_bus.subscribe(TradeReachedTerminalEvent, log_terminal)
    event_bus.subscribe(UpstreamStatusUnrecognizedEvent, log_unrecognized_status)
    event_bus.subscribe(TradeBindingFailedEvent, log_binding_failed)
