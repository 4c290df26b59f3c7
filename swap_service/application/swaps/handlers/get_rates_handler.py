"""GetRates Handler - rate query → ordered, cached quotes."""

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable

from swap_service.application.shared import QueryHandler
from swap_service.application.swaps.dtos import QuoteDTO
from swap_service.application.swaps.queries import GetRatesQuery
from swap_service.domain.swaps.exceptions import NoRoute
from swap_service.domain.swaps.ports import AggregatorPort, QuoteCache
from swap_service.domain.swaps.value_objects import Quote, RateOffer

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GetRatesHandler(QueryHandler[GetRatesQuery, list[QuoteDTO]]):
    """Handler для GetRates query.

    Quotes sorted за quoted_output_amount desc (best deal first), ties -
    provider name asc. Кожен quote кладеться в QuoteCache до повернення.

    Example:
        >>> handler = GetRatesHandler(aggregator, quote_cache, quote_ttl_seconds=120)
        >>> quotes = await handler.handle(GetRatesQuery("btc", "xmr", Decimal("0.1"), "Mainnet", "Mainnet"))
        >>> quotes[0].provider  # best output
    """

    def __init__(
        self,
        aggregator: AggregatorPort,
        quote_cache: QuoteCache,
        quote_ttl_seconds: int = 120,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.aggregator = aggregator
        self.quote_cache = quote_cache
        self.quote_ttl = timedelta(seconds=quote_ttl_seconds)
        self.clock = clock

    async def handle(self, query: GetRatesQuery) -> list[QuoteDTO]:
        """Get rates.

        Raises:
            NoRoute: Upstream повернув нуль quotes.
            UpstreamUnavailable: Transport/protocol failure.
        """
        from_asset = query.from_asset.strip().lower()
        to_asset = query.to_asset.strip().lower()
        network_from = query.network_from.strip()
        network_to = query.network_to.strip()

        if query.amount <= Decimal("0"):
            raise ValueError("Amount must be positive")

        offers = await self.aggregator.get_rates(
            from_asset=from_asset,
            to_asset=to_asset,
            amount=query.amount,
            network_from=network_from,
            network_to=network_to,
            rate_type=query.rate_type,
        )

        if not offers:
            logger.info(
                "get_rates.no_route",
                extra={"pair": f"{from_asset}->{to_asset}", "amount": str(query.amount)},
            )
            raise NoRoute(
                "No provider offers this route",
                from_asset=from_asset,
                to_asset=to_asset,
                network_from=network_from,
                network_to=network_to,
            )

        issued_at = self.clock()
        quotes = [
            self._to_quote(
                offer, query, from_asset, to_asset, network_from, network_to, issued_at
            )
            for offer in offers
        ]
        quotes.sort(key=lambda q: (-q.quoted_output_amount, q.provider))

        for quote in quotes:
            await self.quote_cache.put(quote)

        logger.info(
            "get_rates.completed",
            extra={
                "pair": f"{from_asset}->{to_asset}",
                "quotes_count": len(quotes),
                "best_provider": quotes[0].provider,
            },
        )

        return [QuoteDTO.from_quote(q) for q in quotes]

    def _to_quote(
        self,
        offer: RateOffer,
        query: GetRatesQuery,
        from_asset: str,
        to_asset: str,
        network_from: str,
        network_to: str,
        issued_at: datetime,
    ) -> Quote:
        expires_at = offer.expires_at
        if expires_at is None or expires_at <= issued_at:
            expires_at = issued_at + self.quote_ttl

        return Quote(
            quote_token=offer.quote_token,
            from_asset=from_asset,
            to_asset=to_asset,
            from_network=network_from,
            to_network=network_to,
            amount=query.amount,
            provider=offer.provider,
            quoted_rate=offer.amount_to / query.amount,
            quoted_output_amount=offer.amount_to,
            issued_at=issued_at,
            expires_at=expires_at,
            rate_type=query.rate_type,
            min_amount=offer.min_amount,
            max_amount=offer.max_amount,
            provider_fee=offer.provider_fee,
            kyc_rating=offer.kyc_rating,
            eta_minutes=offer.eta_minutes,
            upstream_rate_id=offer.upstream_rate_id,
        )
