"""GetRates Query."""

from dataclasses import dataclass
from decimal import Decimal

from swap_service.application.shared import Query
from swap_service.domain.swaps.value_objects import RateType


@dataclass(frozen=True)
class GetRatesQuery(Query):
    """Rate query для pair across providers.

    Note:
        Кожен повернутий quote кладеться в QuoteCache.
    """

    from_asset: str
    to_asset: str
    amount: Decimal
    network_from: str
    network_to: str
    rate_type: RateType = RateType.FLOATING
