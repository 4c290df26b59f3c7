"""SwapTrade Aggregate Root - серце swap lifecycle logic.

SwapTrade створюється рівно один раз з consumed Quote + upstream trade, після
чого змінюється ТІЛЬКИ через reconciliation (transition_to). Параметри quote
(assets, networks, amount, provider) та owner - immutable.

State machine (див. TradeStatus):
    CREATED → WAITING_DEPOSIT → CONFIRMING → EXCHANGING → FINISHED
    any non-terminal → FAILED | REFUNDED
    CREATED | WAITING_DEPOSIT → EXPIRED
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from swap_service.domain.shared import AggregateRoot, BusinessRuleViolation

from ..events import (
    TradeCreatedEvent,
    TradeReachedTerminalEvent,
    TradeStatusChangedEvent,
    UpstreamStatusUnrecognizedEvent,
)
from ..value_objects import (
    ANONYMOUS_OWNER,
    Quote,
    RateType,
    TradeStatus,
    UpstreamTrade,
    translate_upstream_status,
)

logger = logging.getLogger(__name__)


class SwapTrade(AggregateRoot):
    """SwapTrade Aggregate Root.

    Правила:
    - trade_id генерується локально (uuid4) і ніколи не reuse
    - upstream_trade_id встановлюється при створенні, immutable
    - status monotonic: transition_to відхиляє (no-op) рух назад
      та будь-який вихід з terminal state
    - UNKNOWN upstream статус логується, stored status не змінюється

    Example:
        >>> trade = SwapTrade.create_from_quote(
        ...     quote=quote,
        ...     upstream=UpstreamTrade(upstream_trade_id="U1", deposit_address="bc1q..."),
        ...     destination_address="4Ab3...",
        ...     refund_address="1Qx...",
        ...     owner="anonymous",
        ... )
        >>> trade.status  # TradeStatus.CREATED
        >>> trade.apply_upstream_status("confirming", checked_at=now)
        >>> trade.status  # TradeStatus.CONFIRMING
        >>> trade.apply_upstream_status("waiting", checked_at=now)  # regression
        >>> trade.status  # still TradeStatus.CONFIRMING
    """

    def __init__(
        self,
        trade_id: str,
        upstream_trade_id: str,
        owner: str,
        quote_token: str,
        from_asset: str,
        to_asset: str,
        from_network: str,
        to_network: str,
        amount: Decimal,
        provider: str,
        deposit_address: str,
        destination_address: str,
        refund_address: str | None = None,
        rate_type: RateType = RateType.FLOATING,
        quoted_rate: Decimal | None = None,
        quoted_output_amount: Decimal | None = None,
        deposit_extra_id: str | None = None,
        destination_extra_id: str | None = None,
        refund_extra_id: str | None = None,
        status: TradeStatus = TradeStatus.CREATED,
        upstream_status: str | None = None,
        upstream_amount_to: Decimal | None = None,
        created_at: Optional[datetime] = None,
        last_checked_at: Optional[datetime] = None,
        terminal_at: Optional[datetime] = None,
        version: int = 1,
    ) -> None:
        """Initialize (або reconstruct з DB) swap trade.

        Args:
            trade_id: Local trade ID (uuid4 string).
            upstream_trade_id: Aggregator trade ID.
            owner: User reference або ANONYMOUS_OWNER.
            quote_token: Consumed quote token.
            from_asset / to_asset / from_network / to_network: Pair з quote.
            amount: Input amount з quote.
            provider: Liquidity provider з quote.
            deposit_address: Address куди користувач відправляє кошти.
            destination_address: Address отримувача (validated).
            refund_address: Address для refund.
            status: Current status (CREATED для нових).
            version: Optimistic-lock counter (persistence).
        """
        super().__init__(trade_id)

        self._validate_amount(amount)
        if not upstream_trade_id:
            raise BusinessRuleViolation("Upstream trade id is required", trade_id=trade_id)
        if not deposit_address:
            raise BusinessRuleViolation("Deposit address is required", trade_id=trade_id)
        if not destination_address:
            raise BusinessRuleViolation("Destination address is required", trade_id=trade_id)
        if status is TradeStatus.UNKNOWN:
            raise BusinessRuleViolation("UNKNOWN is not a storable status", trade_id=trade_id)

        # Identity + binding (immutable)
        self.upstream_trade_id = upstream_trade_id
        self.owner = owner or ANONYMOUS_OWNER
        self.quote_token = quote_token

        # Parameters copied from the bound quote (immutable)
        self.from_asset = from_asset
        self.to_asset = to_asset
        self.from_network = from_network
        self.to_network = to_network
        self.amount = amount
        self.provider = provider
        self.rate_type = rate_type
        self.quoted_rate = quoted_rate
        self.quoted_output_amount = quoted_output_amount

        # Addresses
        self.deposit_address = deposit_address
        self.deposit_extra_id = deposit_extra_id
        self.destination_address = destination_address
        self.destination_extra_id = destination_extra_id
        self.refund_address = refund_address
        self.refund_extra_id = refund_extra_id

        # State
        self.status = status
        self.upstream_status = upstream_status
        self.upstream_amount_to = upstream_amount_to

        # Timestamps
        now = datetime.now(timezone.utc)
        self.created_at = created_at or now
        self.last_checked_at = last_checked_at or self.created_at
        self.terminal_at = terminal_at

        self.version = version

    @property
    def trade_id(self) -> str:
        return self.id  # type: ignore[return-value]

    @classmethod
    def create_from_quote(
        cls,
        quote: Quote,
        upstream: UpstreamTrade,
        destination_address: str,
        refund_address: str | None,
        owner: str | None,
        destination_extra_id: str | None = None,
        refund_extra_id: str | None = None,
        now: datetime | None = None,
    ) -> "SwapTrade":
        """Factory: bind consumed quote + upstream trade в новий CREATED trade.

        Args:
            quote: Consumed quote (source of immutable parameters).
            upstream: Upstream create-trade result.
            destination_address: Validated destination address.
            refund_address: Refund address.
            owner: User reference або None (anonymous).

        Returns:
            SwapTrade в CREATED status з TradeCreatedEvent.
        """
        now = now or datetime.now(timezone.utc)
        trade = cls(
            trade_id=str(uuid.uuid4()),
            upstream_trade_id=upstream.upstream_trade_id,
            owner=owner or ANONYMOUS_OWNER,
            quote_token=quote.quote_token,
            from_asset=quote.from_asset,
            to_asset=quote.to_asset,
            from_network=quote.from_network,
            to_network=quote.to_network,
            amount=quote.amount,
            provider=quote.provider,
            rate_type=quote.rate_type,
            quoted_rate=quote.quoted_rate,
            quoted_output_amount=quote.quoted_output_amount,
            deposit_address=upstream.deposit_address,
            deposit_extra_id=upstream.deposit_extra_id,
            destination_address=destination_address,
            destination_extra_id=destination_extra_id,
            refund_address=refund_address,
            refund_extra_id=refund_extra_id,
            status=TradeStatus.CREATED,
            upstream_status=upstream.status,
            upstream_amount_to=upstream.amount_to,
            created_at=now,
            last_checked_at=now,
        )

        trade.add_domain_event(
            TradeCreatedEvent(
                trade_id=trade.trade_id,
                upstream_trade_id=trade.upstream_trade_id,
                owner=trade.owner,
                provider=trade.provider,
                from_asset=trade.from_asset,
                to_asset=trade.to_asset,
                amount=trade.amount,
            )
        )
        return trade

    # --- RECONCILIATION ---

    def apply_upstream_status(
        self,
        upstream_status: str,
        checked_at: datetime,
        amount_to: Decimal | None = None,
    ) -> bool:
        """Apply upstream-reported status через translation table.

        Args:
            upstream_status: Raw upstream status string.
            checked_at: When upstream was polled.
            amount_to: Latest upstream output estimate (optional).

        Returns:
            True якщо status змінився.
        """
        self.upstream_status = upstream_status
        if amount_to is not None:
            self.upstream_amount_to = amount_to

        target = translate_upstream_status(upstream_status)
        if target is TradeStatus.UNKNOWN:
            self.last_checked_at = checked_at
            self.add_domain_event(
                UpstreamStatusUnrecognizedEvent(
                    trade_id=self.trade_id,
                    upstream_trade_id=self.upstream_trade_id,
                    upstream_status=upstream_status,
                )
            )
            return False

        return self.transition_to(target, checked_at=checked_at)

    def transition_to(self, target: TradeStatus, checked_at: datetime) -> bool:
        """Monotonic transition guard - єдиний шлях зміни status.

        Illegal moves (backward, out of terminal, into UNKNOWN) - no-op, не
        error: upstream може повернути застарілий status.

        Args:
            target: Desired status.
            checked_at: Observation timestamp.

        Returns:
            True якщо transition застосований.
        """
        if checked_at > self.last_checked_at:
            self.last_checked_at = checked_at

        if target == self.status:
            return False

        if not self.status.can_transition_to(target):
            logger.info(
                "swap_trade.transition_rejected",
                extra={
                    "trade_id": self.trade_id,
                    "from_status": self.status.value,
                    "to_status": target.value,
                },
            )
            return False

        previous = self.status
        self.status = target

        self.add_domain_event(
            TradeStatusChangedEvent(
                trade_id=self.trade_id,
                owner=self.owner,
                from_status=previous.value,
                to_status=target.value,
                upstream_status=self.upstream_status,
            )
        )

        if target.is_terminal:
            self.terminal_at = checked_at
            self.add_domain_event(
                TradeReachedTerminalEvent(
                    trade_id=self.trade_id,
                    owner=self.owner,
                    status=target.value,
                )
            )

        return True

    def expire_if_deposit_window_elapsed(
        self, deposit_window: timedelta, now: datetime
    ) -> bool:
        """Locally infer EXPIRED коли deposit window минув без коштів.

        Застосовується тільки з CREATED / WAITING_DEPOSIT.

        Returns:
            True якщо trade перейшов в EXPIRED.
        """
        if self.status not in (TradeStatus.CREATED, TradeStatus.WAITING_DEPOSIT):
            return False
        if now - self.created_at <= deposit_window:
            return False
        return self.transition_to(TradeStatus.EXPIRED, checked_at=now)

    # --- QUERIES ---

    @property
    def is_terminal(self) -> bool:
        """Check if trade в final state (не може змінитись)."""
        return self.status.is_terminal

    @property
    def is_anonymous(self) -> bool:
        return self.owner == ANONYMOUS_OWNER

    def needs_refresh(self, threshold: timedelta, now: datetime | None = None) -> bool:
        """Non-terminal trade чий last_checked_at старший за threshold."""
        if self.is_terminal:
            return False
        now = now or datetime.now(timezone.utc)
        return now - self.last_checked_at >= threshold

    def _validate_amount(self, amount: Decimal) -> None:
        if amount <= Decimal("0"):
            raise BusinessRuleViolation(
                "Trade amount must be positive",
                amount=str(amount),
            )

    def __repr__(self) -> str:
        return (
            f"SwapTrade(id={self.id}, upstream_trade_id={self.upstream_trade_id}, "
            f"pair={self.from_asset}->{self.to_asset}, status={self.status.value})"
        )
