"""Internal aggregator transport errors.

Не виходять за межі adapter: TrocadorAdapter перетворює їх на domain
exceptions (UpstreamUnavailable, UpstreamRejected).
"""

from .retry import RetryableError


class AggregatorTransientError(RetryableError):
    """Timeout, connection error, HTTP 429/5xx або "rate limit" response."""

    pass


class AggregatorErrorResponse(Exception):
    """Aggregator відповів, але відмовив (HTTP 4xx або {"error": ...}).

    Aggregator живий - circuit breaker це не рахує як failure.
    """

    def __init__(self, status_code: int, reason: str) -> None:
        super().__init__(f"Aggregator error {status_code}: {reason}")
        self.status_code = status_code
        self.reason = reason
