"""Quote DTO - data transfer object for rate responses."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from swap_service.domain.swaps.value_objects import Quote


@dataclass
class QuoteDTO:
    """Quote data transfer object."""

    quote_token: str
    provider: str
    from_asset: str
    to_asset: str
    from_network: str
    to_network: str
    amount: Decimal
    rate: Decimal
    output_amount: Decimal
    rate_type: str
    issued_at: datetime
    expires_at: datetime
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    provider_fee: Decimal | None = None
    kyc_rating: str | None = None
    eta_minutes: int | None = None

    @classmethod
    def from_quote(cls, quote: Quote) -> "QuoteDTO":
        return cls(
            quote_token=quote.quote_token,
            provider=quote.provider,
            from_asset=quote.from_asset,
            to_asset=quote.to_asset,
            from_network=quote.from_network,
            to_network=quote.to_network,
            amount=quote.amount,
            rate=quote.quoted_rate,
            output_amount=quote.quoted_output_amount,
            rate_type=quote.rate_type.value,
            issued_at=quote.issued_at,
            expires_at=quote.expires_at,
            min_amount=quote.min_amount,
            max_amount=quote.max_amount,
            provider_fee=quote.provider_fee,
            kyc_rating=quote.kyc_rating,
            eta_minutes=quote.eta_minutes,
        )
