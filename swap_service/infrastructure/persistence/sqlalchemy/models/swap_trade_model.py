"""SwapTrade ORM Model - SQLAlchemy mapping для SwapTrade aggregate."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

# Crypto amounts: 24 integer digits, 12 fractional
AMOUNT = Numeric(precision=36, scale=12)


class SwapTradeModel(Base):
    """ORM model для SwapTrade aggregate.

    Це ТІЛЬКИ для персистенції - БЕЗ business logic!
    Business logic в domain.swaps.entities.SwapTrade.
    """

    __tablename__ = "swap_trades"

    # Primary key (uuid4 string, generated in domain)
    trade_id: Mapped[str] = mapped_column(String(36), primary_key=True)

    # Binding
    upstream_trade_id: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True, index=True
    )
    quote_token: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    owner: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    # Quote parameters (immutable)
    from_asset: Mapped[str] = mapped_column(String(20), nullable=False)
    to_asset: Mapped[str] = mapped_column(String(20), nullable=False)
    from_network: Mapped[str] = mapped_column(String(50), nullable=False)
    to_network: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[Decimal] = mapped_column(AMOUNT, nullable=False)
    provider: Mapped[str] = mapped_column(String(100), nullable=False)
    rate_type: Mapped[str] = mapped_column(String(10), nullable=False)  # "floating" | "fixed"
    quoted_rate: Mapped[Decimal | None] = mapped_column(AMOUNT, nullable=True)
    quoted_output_amount: Mapped[Decimal | None] = mapped_column(AMOUNT, nullable=True)

    # Addresses
    deposit_address: Mapped[str] = mapped_column(String(255), nullable=False)
    deposit_extra_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    destination_address: Mapped[str] = mapped_column(String(255), nullable=False)
    destination_extra_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    refund_address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    refund_extra_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Lifecycle
    status: Mapped[str] = mapped_column(String(30), nullable=False)
    upstream_status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    upstream_amount_to: Mapped[Decimal | None] = mapped_column(AMOUNT, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    last_checked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    terminal_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Optimistic locking (для concurrent updates)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        # Query: background sweep (non-terminal, stale first)
        Index("ix_swap_trades_status_last_checked", "status", "last_checked_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<SwapTradeModel(trade_id={self.trade_id}, "
            f"upstream_trade_id={self.upstream_trade_id}, status={self.status})>"
        )
