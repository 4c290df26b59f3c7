"""AggregatorPort - interface до liquidity aggregator API.

Engine працює тільки з цим interface; конкретний HTTP API (Trocador)
живе в infrastructure/aggregator/adapters.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from ..value_objects import (
    AddressVerdict,
    Quote,
    RateOffer,
    RateType,
    UpstreamTrade,
    UpstreamTradeStatus,
)


class AggregatorPort(ABC):
    """Abstract interface для aggregator client.

    Всі методи можуть raise UpstreamUnavailable (transport, timeout,
    malformed response, open circuit). create_trade також raise
    UpstreamRejected з upstream reason.

    Read-only методи (get_rates, get_trade_status, validate_address)
    adapter може retry; create_trade - ніколи.
    """

    @abstractmethod
    async def get_rates(
        self,
        from_asset: str,
        to_asset: str,
        amount: Decimal,
        network_from: str,
        network_to: str,
        rate_type: RateType = RateType.FLOATING,
    ) -> list[RateOffer]:
        """Query rates для pair across providers.

        Returns:
            Offers (може бути empty - engine перетворює на NoRoute).
        """
        pass

    @abstractmethod
    async def create_trade(
        self,
        quote: Quote,
        destination_address: str,
        refund_address: str | None,
        destination_extra_id: str | None = None,
        refund_extra_id: str | None = None,
    ) -> UpstreamTrade:
        """Create upstream trade з consumed quote.

        Raises:
            UpstreamRejected: Aggregator відхилив запит (reason verbatim).
            UpstreamUnavailable: Transport failure (outcome невідомий).
        """
        pass

    @abstractmethod
    async def get_trade_status(self, upstream_trade_id: str) -> UpstreamTradeStatus:
        """Poll upstream status для trade."""
        pass

    @abstractmethod
    async def validate_address(
        self, address: str, asset: str, network: str
    ) -> AddressVerdict:
        """Ask aggregator чи address валідний для asset/network."""
        pass

    async def close(self) -> None:
        """Release transport resources (override якщо потрібно)."""
        return None
