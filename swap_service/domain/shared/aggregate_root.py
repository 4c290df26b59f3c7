"""Base AggregateRoot class for domain model.

AggregateRoot - головний Entity в Aggregate, який контролює consistency
та збирає domain events до моменту commit.
"""

from typing import List

from .domain_event import DomainEvent
from .entity import Entity


class AggregateRoot(Entity):
    """Base class for aggregate roots in DDD.

    AggregateRoot - це:
    - **Consistency boundary**: state machine правила перевіряються тут
    - **Transaction boundary**: зберігається/завантажується як єдине ціле
    - **Event producer**: генерує domain events про зміни

    Example:
        >>> trade = SwapTrade.create_from_quote(quote, ...)
        >>> trade.get_domain_events()  # [TradeCreatedEvent(...)]
        >>> await event_bus.publish_all(trade.get_domain_events())
        >>> trade.clear_domain_events()
    """

    def __init__(self, id: str | None = None) -> None:
        super().__init__(id)
        self._domain_events: List[DomainEvent] = []

    def add_domain_event(self, event: DomainEvent) -> None:
        """Add domain event to pending events list.

        Events публікуються infrastructure layer після successful commit.

        Args:
            event: Domain event to add.
        """
        self._domain_events.append(event)

    def get_domain_events(self) -> List[DomainEvent]:
        """Get all pending domain events.

        Returns:
            Copy of the pending events list.
        """
        return self._domain_events.copy()

    def clear_domain_events(self) -> None:
        """Clear pending events (після публікації)."""
        self._domain_events.clear()
