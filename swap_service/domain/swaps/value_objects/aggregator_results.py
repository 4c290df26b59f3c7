"""Value objects returned by AggregatorPort.

Aggregator adapters normalize upstream JSON до цих типів, так що engine
не залежить від конкретного API.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from swap_service.domain.shared import ValueObject


@dataclass(frozen=True)
class RateOffer(ValueObject):
    """Один рядок rate query response (одна offer від одного provider)."""

    quote_token: str
    """Opaque token issued upstream; потрібен для create_trade."""

    provider: str
    amount_from: Decimal
    amount_to: Decimal
    """Estimated output amount."""

    expires_at: datetime | None = None
    """Upstream expiry, якщо aggregator його повідомляє."""

    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    provider_fee: Decimal | None = None
    kyc_rating: str | None = None
    eta_minutes: int | None = None
    upstream_rate_id: str | None = None


@dataclass(frozen=True)
class UpstreamTrade(ValueObject):
    """Результат upstream create-trade."""

    upstream_trade_id: str
    deposit_address: str
    deposit_extra_id: str | None = None
    amount_to: Decimal | None = None
    status: str | None = None


@dataclass(frozen=True)
class UpstreamTradeStatus(ValueObject):
    """Результат upstream status poll."""

    upstream_trade_id: str
    status: str
    amount_to: Decimal | None = None
    confirmations: int | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)
