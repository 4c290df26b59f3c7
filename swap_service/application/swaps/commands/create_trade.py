"""CreateTrade Command - bind quote token до нового trade."""

from dataclasses import dataclass

from swap_service.application.shared import Command


@dataclass(frozen=True)
class CreateTradeCommand(Command):
    """Command для створення swap trade.

    Orchestrates:
    1. Peek quote + validate destination address (quote лишається usable)
    2. Consume quote (exactly-once)
    3. Create upstream trade (never retried)
    4. Persist CREATED trade (retried, DuplicateUpstreamId recovered)

    Example:
        >>> command = CreateTradeCommand(
        ...     quote_token="Y7kd:changenow",
        ...     address="4AbC...",
        ...     refund_address="bc1q...",
        ...     owner="42",
        ... )
    """

    quote_token: str
    """Token з rate query."""

    address: str
    """Destination address (validated against quote.to_asset/to_network)."""

    refund_address: str | None = None

    owner: str | None = None
    """User reference; None → anonymous."""

    address_extra_id: str | None = None
    """Memo / destination tag для destination address."""

    refund_extra_id: str | None = None
