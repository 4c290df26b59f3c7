"""Base DomainEvent class for event-driven architecture."""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4


@dataclass(frozen=True)
class DomainEvent(ABC):
    """Base class for all domain events.

    Events іменуються в минулому часі (TradeCreated, TradeStatusChanged),
    immutable, містять всю інформацію про те що сталось.

    Example:
        >>> @dataclass(frozen=True)
        ... class TradeCreatedEvent(DomainEvent):
        ...     trade_id: str
        ...     upstream_trade_id: str

        >>> event_bus.subscribe(TradeCreatedEvent, notify_owner)
    """

    event_id: UUID = field(default_factory=uuid4, init=False)
    """Унікальний ID події (auto-generated)."""

    occurred_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), init=False
    )
    """Час коли подія сталась (UTC)."""

    @property
    def event_name(self) -> str:
        """Event class name (e.g., "TradeCreatedEvent")."""
        return self.__class__.__name__

    def __repr__(self) -> str:
        return f"{self.event_name}(event_id={self.event_id}, occurred_at={self.occurred_at})"
