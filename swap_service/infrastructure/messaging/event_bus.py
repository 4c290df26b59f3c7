"""Event Bus - domain events infrastructure.

- SwapTrade emits events (TradeCreated, TradeStatusChanged, ...)
- Application/infrastructure services subscribe to events
- Domain не знає про subscribers
"""

import logging
from collections import defaultdict
from typing import Awaitable, Callable, Type

from swap_service.domain.shared import DomainEvent

logger = logging.getLogger(__name__)

# Event handler signature: async function that takes DomainEvent
EventHandler = Callable[[DomainEvent], Awaitable[None]]


class EventBus:
    """Event Bus для domain events.

    Handlers викликаються після commit; failure одного handler логується
    і не впливає на інші handlers або на request.

    Example:
        >>> event_bus = get_event_bus()
        >>> event_bus.subscribe(TradeReachedTerminalEvent, notify_owner)
        >>> await event_bus.publish_all(trade.get_domain_events())
    """

    def __init__(self) -> None:
        self._subscribers: dict[Type[DomainEvent], list[EventHandler]] = defaultdict(list)
        logger.debug("event_bus.initialized")

    def subscribe(
        self, event_type: Type[DomainEvent], handler: EventHandler
    ) -> None:
        """Subscribe handler to event type."""
        self._subscribers[event_type].append(handler)
        logger.debug(
            "event_bus.subscription_added",
            extra={
                "event_type": event_type.__name__,
                "handler": getattr(handler, "__name__", repr(handler)),
            },
        )

    def unsubscribe(
        self, event_type: Type[DomainEvent], handler: EventHandler
    ) -> None:
        """Unsubscribe handler from event type."""
        if handler in self._subscribers[event_type]:
            self._subscribers[event_type].remove(handler)

    async def publish(self, event: DomainEvent) -> None:
        """Publish single domain event to all handlers of its type."""
        event_type = type(event)
        handlers = self._subscribers.get(event_type, [])

        if not handlers:
            logger.debug(
                "event_bus.no_subscribers",
                extra={"event_type": event_type.__name__},
            )
            return

        for handler in list(handlers):
            try:
                await handler(event)
            except Exception as e:
                # Log error but continue with other handlers
                logger.error(
                    "event_bus.handler_failed",
                    extra={
                        "event_type": event_type.__name__,
                        "handler": getattr(handler, "__name__", repr(handler)),
                        "error": str(e),
                    },
                    exc_info=True,
                )

    async def publish_all(self, events: list[DomainEvent]) -> None:
        """Publish multiple domain events in order."""
        for event in events:
            await self.publish(event)

    def get_subscribers_count(self, event_type: Type[DomainEvent]) -> int:
        return len(self._subscribers.get(event_type, []))


# Singleton instance (можна inject як dependency)
_event_bus_instance: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get singleton event bus instance."""
    global _event_bus_instance
    if _event_bus_instance is None:
        _event_bus_instance = EventBus()
    return _event_bus_instance
