"""Enums для Swaps bounded context."""

from enum import Enum

ANONYMOUS_OWNER = "anonymous"
"""Owner marker для trades створених без session."""


class TradeStatus(str, Enum):
    """Swap trade lifecycle status.

    State machine:
        CREATED → WAITING_DEPOSIT → CONFIRMING → EXCHANGING → FINISHED
        any non-terminal → FAILED | REFUNDED
        CREATED | WAITING_DEPOSIT → EXPIRED (deposit window elapsed)

    Status monotonic: ніколи не повертається до попереднього non-terminal
    стану і ніколи не виходить з terminal стану.

    UNKNOWN - sentinel для нерозпізнаних upstream статусів. Він ніколи не
    зберігається: transition в UNKNOWN завжди відхиляється.
    """

    CREATED = "created"
    """Trade створений upstream, deposit ще не очікується/не побачений."""

    WAITING_DEPOSIT = "waiting_deposit"
    """Очікуємо deposit від користувача."""

    CONFIRMING = "confirming"
    """Deposit побачений, чекаємо confirmations."""

    EXCHANGING = "exchanging"
    """Provider виконує обмін / відправляє кошти."""

    FINISHED = "finished"
    """Кошти відправлені на destination address."""

    FAILED = "failed"
    """Swap failed або halted provider-ом."""

    REFUNDED = "refunded"
    """Кошти повернуті на refund address."""

    EXPIRED = "expired"
    """Deposit window минув без коштів."""

    UNKNOWN = "unknown"
    """Sentinel: upstream повернув статус поза translation table."""

    @property
    def is_terminal(self) -> bool:
        """Check if status is final (no further transitions)."""
        return self in TERMINAL_STATUSES

    def can_transition_to(self, target: "TradeStatus") -> bool:
        """Check if transition self → target дозволений state machine.

        Same-status "transition" повертає False: це не зміна стану.

        Args:
            target: Status reported by reconciliation.

        Returns:
            True if the move is forward in the graph.
        """
        return target in ALLOWED_TRANSITIONS.get(self, frozenset())


TERMINAL_STATUSES = frozenset(
    {
        TradeStatus.FINISHED,
        TradeStatus.FAILED,
        TradeStatus.REFUNDED,
        TradeStatus.EXPIRED,
    }
)

ALLOWED_TRANSITIONS: dict[TradeStatus, frozenset[TradeStatus]] = {
    TradeStatus.CREATED: frozenset(
        {
            TradeStatus.WAITING_DEPOSIT,
            TradeStatus.CONFIRMING,
            TradeStatus.EXCHANGING,
            TradeStatus.FINISHED,
            TradeStatus.FAILED,
            TradeStatus.REFUNDED,
            TradeStatus.EXPIRED,
        }
    ),
    TradeStatus.WAITING_DEPOSIT: frozenset(
        {
            TradeStatus.CONFIRMING,
            TradeStatus.EXCHANGING,
            TradeStatus.FINISHED,
            TradeStatus.FAILED,
            TradeStatus.REFUNDED,
            TradeStatus.EXPIRED,
        }
    ),
    TradeStatus.CONFIRMING: frozenset(
        {
            TradeStatus.EXCHANGING,
            TradeStatus.FINISHED,
            TradeStatus.FAILED,
            TradeStatus.REFUNDED,
        }
    ),
    TradeStatus.EXCHANGING: frozenset(
        {
            TradeStatus.FINISHED,
            TradeStatus.FAILED,
            TradeStatus.REFUNDED,
        }
    ),
    # Terminal states + sentinel: no outbound transitions
    TradeStatus.FINISHED: frozenset(),
    TradeStatus.FAILED: frozenset(),
    TradeStatus.REFUNDED: frozenset(),
    TradeStatus.EXPIRED: frozenset(),
    TradeStatus.UNKNOWN: frozenset(),
}

ACTIVE_STATUSES = frozenset(
    s for s in TradeStatus if not s.is_terminal and s is not TradeStatus.UNKNOWN
)


class RateType(str, Enum):
    """Rate type запитаний у aggregator."""

    FLOATING = "floating"
    """Output amount може змінитись до deposit."""

    FIXED = "fixed"
    """Provider гарантує output amount."""
