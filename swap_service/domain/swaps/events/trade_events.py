"""Domain Events для Swaps bounded context."""

from dataclasses import dataclass
from decimal import Decimal

from swap_service.domain.shared import DomainEvent


@dataclass(frozen=True)
class TradeCreatedEvent(DomainEvent):
    """Event: quote bound до нового trade, upstream trade існує."""

    trade_id: str
    upstream_trade_id: str
    owner: str
    provider: str
    from_asset: str
    to_asset: str
    amount: Decimal


@dataclass(frozen=True)
class TradeStatusChangedEvent(DomainEvent):
    """Event: reconciliation перевів trade вперед по state machine."""

    trade_id: str
    owner: str
    from_status: str
    to_status: str
    upstream_status: str | None


@dataclass(frozen=True)
class TradeReachedTerminalEvent(DomainEvent):
    """Event: trade досяг terminal state (finished/failed/refunded/expired).

    Subscribers можуть:
    - Відправити notification користувачу
    - Attach swap до ledger account owner-а
    """

    trade_id: str
    owner: str
    status: str


@dataclass(frozen=True)
class UpstreamStatusUnrecognizedEvent(DomainEvent):
    """Event: upstream vocabulary drift - статус поза translation table."""

    trade_id: str
    upstream_trade_id: str
    upstream_status: str


@dataclass(frozen=True)
class TradeBindingFailedEvent(DomainEvent):
    """Event: upstream trade створений, але local record не збережений.

    Critical event - потребує manual binding (upstream_trade_id + quote).
    """

    upstream_trade_id: str
    quote_token: str
    deposit_address: str
    owner: str
    reason: str
