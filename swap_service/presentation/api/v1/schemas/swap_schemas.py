"""Pydantic schemas for Swap API requests/responses."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from swap_service.application.swaps.dtos import QuoteDTO, TradeDTO


# ============================================================================
# REQUEST SCHEMAS
# ============================================================================


class CreateTradeRequest(BaseModel):
    """Request schema для створення swap trade.

    Example:
        {
            "quote_token": "Y7kdP2:changenow",
            "address": "4AbC...",
            "refund_address": "bc1q..."
        }
    """

    quote_token: str = Field(..., min_length=1, description="Token з /swap/rates")
    address: str = Field(..., min_length=1, description="Destination address")
    refund_address: str | None = Field(default=None, description="Refund address (optional)")
    address_extra_id: str | None = Field(
        default=None, description="Memo / destination tag для destination address"
    )
    refund_extra_id: str | None = Field(default=None, description="Memo для refund address")

    @field_validator("quote_token", "address")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    model_config = {
        "json_schema_extra": {
            "example": {
                "quote_token": "Y7kdP2:changenow",
                "address": "4AbC8x9ZqkLr...",
                "refund_address": "bc1qxy2kgdygjrsqtzq2n0yrf2493p83kkfjhx0wlh",
            }
        }
    }


class ValidateAddressRequest(BaseModel):
    """Request schema для address validation."""

    address: str = Field(..., description="Address to validate")
    asset: str = Field(..., min_length=1, description="Asset ticker (e.g. xmr)")
    network: str = Field(..., min_length=1, description="Network (e.g. Mainnet)")


# ============================================================================
# RESPONSE SCHEMAS
# ============================================================================


class QuoteResponse(BaseModel):
    """Один provider quote."""

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
    def from_dto(cls, dto: QuoteDTO) -> "QuoteResponse":
        return cls.model_validate(dto, from_attributes=True)


class RatesResponse(BaseModel):
    """Quotes, sorted by output amount (best first)."""

    quotes: list[QuoteResponse]


class TradeResponse(BaseModel):
    """Response schema для trade."""

    model_config = ConfigDict(from_attributes=True)

    trade_id: str
    upstream_trade_id: str
    status: str
    upstream_status: str | None
    provider: str
    from_asset: str
    to_asset: str
    from_network: str
    to_network: str
    amount: Decimal
    rate_type: str
    quoted_output_amount: Decimal | None
    deposit_address: str
    deposit_extra_id: str | None
    destination_address: str
    refund_address: str | None
    created_at: datetime
    last_checked_at: datetime
    terminal_at: datetime | None
    is_stale: bool = Field(
        default=False,
        description="True якщо status refresh не вдалося зберегти (last-known record)",
    )

    @classmethod
    def from_dto(cls, dto: TradeDTO) -> "TradeResponse":
        return cls.model_validate(dto)


class AddressValidationResponse(BaseModel):
    valid: bool
    reason: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error kind (e.g. QuoteExpired)")
    message: str = Field(..., description="Human-readable message")
    details: dict | list = Field(default_factory=dict)
