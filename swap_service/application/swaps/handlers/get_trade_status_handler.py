"""GetTradeStatus Handler - read path з on-demand refresh."""

from swap_service.application.shared import QueryHandler
from swap_service.application.swaps.dtos import TradeDTO
from swap_service.application.swaps.queries import GetTradeStatusQuery
from swap_service.application.swaps.services import StatusReconciler


class GetTradeStatusHandler(QueryHandler[GetTradeStatusQuery, TradeDTO]):
    """Handler для GetTradeStatus query.

    Terminal trade → stored record без upstream call.
    Non-terminal + stale → re-poll через StatusReconciler.
    """

    def __init__(self, reconciler: StatusReconciler) -> None:
        self.reconciler = reconciler

    async def handle(self, query: GetTradeStatusQuery) -> TradeDTO:
        """Raises TradeNotFound / UpstreamUnavailable."""
        result = await self.reconciler.reconcile(query.trade_id)
        return TradeDTO.from_entity(result.trade, is_stale=result.is_stale)
