"""Quote value object - ephemeral, provider-specific rate offer."""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from swap_service.domain.shared import ValueObject, validate_value_object

from .enums import RateType


@dataclass(frozen=True)
class Quote(ValueObject):
    """Quote що зберігається в QuoteCache до consumption.

    Quote містить всі параметри потрібні для створення trade: після
    consume вони копіюються в SwapTrade і більше не змінюються.

    Example:
        >>> quote = Quote(
        ...     quote_token="ab12:changenow",
        ...     from_asset="btc",
        ...     to_asset="xmr",
        ...     from_network="Mainnet",
        ...     to_network="Mainnet",
        ...     amount=Decimal("0.1"),
        ...     provider="changenow",
        ...     quoted_rate=Decimal("61"),
        ...     quoted_output_amount=Decimal("6.1"),
        ...     issued_at=now,
        ...     expires_at=now + timedelta(seconds=120),
        ... )
        >>> quote.is_expired(now)  # False
    """

    quote_token: str
    from_asset: str
    to_asset: str
    from_network: str
    to_network: str
    amount: Decimal
    provider: str
    quoted_rate: Decimal
    quoted_output_amount: Decimal
    issued_at: datetime
    expires_at: datetime

    rate_type: RateType = RateType.FLOATING
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    provider_fee: Decimal | None = None
    kyc_rating: str | None = None
    eta_minutes: int | None = None
    upstream_rate_id: str | None = None

    def __post_init__(self) -> None:
        validate_value_object(bool(self.quote_token), "Quote token is required")
        validate_value_object(self.amount > Decimal("0"), "Quote amount must be positive")
        validate_value_object(
            self.quoted_output_amount >= Decimal("0"),
            "Quoted output amount cannot be negative",
        )
        validate_value_object(
            self.expires_at > self.issued_at,
            "Quote expires_at must be after issued_at",
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        """Quote непридатний коли now > expires_at."""
        now = now or datetime.now(timezone.utc)
        return now > self.expires_at

    def seconds_to_expiry(self, now: datetime | None = None) -> float:
        now = now or datetime.now(timezone.utc)
        return (self.expires_at - now).total_seconds()
