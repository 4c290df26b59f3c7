"""Create swap_trades table.

Trade record для quote-to-trade binding:
- upstream_trade_id UNIQUE (idempotent persistence retries)
- quote_token UNIQUE (один trade на quote)
- composite index (status, last_checked_at) для background sweep

Revision ID: 0001
Revises: None
Create Date: 2026-01-01
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

AMOUNT = sa.Numeric(precision=36, scale=12)


def upgrade() -> None:
    op.create_table(
        "swap_trades",
        sa.Column("trade_id", sa.String(36), primary_key=True),
        # Binding
        sa.Column("upstream_trade_id", sa.String(100), nullable=False),
        sa.Column("quote_token", sa.String(255), nullable=False),
        sa.Column("owner", sa.String(100), nullable=False),
        # Quote parameters
        sa.Column("from_asset", sa.String(20), nullable=False),
        sa.Column("to_asset", sa.String(20), nullable=False),
        sa.Column("from_network", sa.String(50), nullable=False),
        sa.Column("to_network", sa.String(50), nullable=False),
        sa.Column("amount", AMOUNT, nullable=False),
        sa.Column("provider", sa.String(100), nullable=False),
        sa.Column("rate_type", sa.String(10), nullable=False),
        sa.Column("quoted_rate", AMOUNT, nullable=True),
        sa.Column("quoted_output_amount", AMOUNT, nullable=True),
        # Addresses
        sa.Column("deposit_address", sa.String(255), nullable=False),
        sa.Column("deposit_extra_id", sa.String(255), nullable=True),
        sa.Column("destination_address", sa.String(255), nullable=False),
        sa.Column("destination_extra_id", sa.String(255), nullable=True),
        sa.Column("refund_address", sa.String(255), nullable=True),
        sa.Column("refund_extra_id", sa.String(255), nullable=True),
        # Lifecycle
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("upstream_status", sa.String(50), nullable=True),
        sa.Column("upstream_amount_to", AMOUNT, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_checked_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("terminal_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.UniqueConstraint("quote_token", name="uq_swap_trades_quote_token"),
    )

    op.create_index(
        "ix_swap_trades_upstream_trade_id", "swap_trades", ["upstream_trade_id"], unique=True
    )
    op.create_index("ix_swap_trades_owner", "swap_trades", ["owner"])
    op.create_index("ix_swap_trades_created_at", "swap_trades", ["created_at"])
    op.create_index(
        "ix_swap_trades_status_last_checked",
        "swap_trades",
        ["status", "last_checked_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_swap_trades_status_last_checked", table_name="swap_trades")
    op.drop_index("ix_swap_trades_created_at", table_name="swap_trades")
    op.drop_index("ix_swap_trades_owner", table_name="swap_trades")
    op.drop_index("ix_swap_trades_upstream_trade_id", table_name="swap_trades")
    op.drop_table("swap_trades")
