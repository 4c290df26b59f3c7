"""Exceptions для Swaps bounded context.

Кожен kind surfaced до caller окремо: користувач посеред swap має знати,
чи retry, чи брати новий quote, чи виправляти address.
"""

from swap_service.domain.shared import AggregateNotFound, DomainException


class SwapError(DomainException):
    """Base exception для всіх swap errors."""

    pass


class ValidationUnavailable(SwapError):
    """Raised коли aggregator не може перевірити address (unreachable/malformed).

    Це hard block для create_trade, ніколи не "valid" by default.
    """

    pass


class InvalidAddress(SwapError):
    """Raised коли aggregator повернув negative verdict для address."""

    def __init__(self, message: str, reason: str | None = None, **context) -> None:
        super().__init__(message, **context)
        self.reason = reason


class NoRoute(SwapError):
    """Raised коли rate query повернув нуль quotes."""

    pass


class UpstreamUnavailable(SwapError):
    """Raised на transport/protocol failure або timeout aggregator-а.

    Transient: read-only операції можна retry.
    """

    pass


class QuoteExpired(SwapError):
    """Raised коли quote token знайдений, але now > expires_at."""

    pass


class QuoteNotFound(SwapError):
    """Raised коли quote token невідомий cache."""

    pass


class QuoteAlreadyUsed(SwapError):
    """Raised коли quote token вже consumed іншим create_trade."""

    pass


class UpstreamRejected(SwapError):
    """Raised коли aggregator відхилив create-trade.

    reason містить upstream human-readable пояснення verbatim.
    """

    def __init__(self, message: str, reason: str | None = None, **context) -> None:
        super().__init__(message, **context)
        self.reason = reason


class DuplicateUpstreamId(SwapError):
    """Raised Trade Store коли upstream_trade_id вже існує.

    Idempotency guard для create_trade retry path; engine recovers locally.
    """

    pass


class TradeNotFound(SwapError, AggregateNotFound):
    """Raised коли trade_id невідомий."""

    pass


class TradePersistenceFailed(SwapError):
    """Raised коли upstream trade створений, але local persistence exhausted.

    Upstream binding залишається в logs + TradeBindingFailedEvent.
    """

    pass


class TradeStoreUnavailable(SwapError):
    """Raised коли trade store не відповідає після bounded retries (read path)."""

    pass
