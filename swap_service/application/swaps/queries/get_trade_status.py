"""GetTradeStatus Query."""

from dataclasses import dataclass

from swap_service.application.shared import Query


@dataclass(frozen=True)
class GetTradeStatusQuery(Query):
    """Current view of a trade (refreshed з upstream якщо stale)."""

    trade_id: str
