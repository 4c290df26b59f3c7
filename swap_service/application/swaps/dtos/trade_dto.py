"""Trade DTO - data transfer object for API responses."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from swap_service.domain.swaps.entities import SwapTrade


@dataclass
class TradeDTO:
    """Trade data transfer object.

    Використовується для API responses та між layers.
    is_stale=True: upstream poll відбувся, але persistence exhausted -
    повертається last-known record.
    """

    trade_id: str
    upstream_trade_id: str
    owner: str
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
    is_stale: bool = False

    @classmethod
    def from_entity(cls, trade: SwapTrade, is_stale: bool = False) -> "TradeDTO":
        return cls(
            trade_id=trade.trade_id,
            upstream_trade_id=trade.upstream_trade_id,
            owner=trade.owner,
            status=trade.status.value,
            upstream_status=trade.upstream_status,
            provider=trade.provider,
            from_asset=trade.from_asset,
            to_asset=trade.to_asset,
            from_network=trade.from_network,
            to_network=trade.to_network,
            amount=trade.amount,
            rate_type=trade.rate_type.value,
            quoted_output_amount=trade.quoted_output_amount,
            deposit_address=trade.deposit_address,
            deposit_extra_id=trade.deposit_extra_id,
            destination_address=trade.destination_address,
            refund_address=trade.refund_address,
            created_at=trade.created_at,
            last_checked_at=trade.last_checked_at,
            terminal_at=trade.terminal_at,
            is_stale=is_stale,
        )
