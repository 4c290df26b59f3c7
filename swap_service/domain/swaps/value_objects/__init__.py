"""Value Objects для Swaps bounded context."""

from .aggregator_results import RateOffer, UpstreamTrade, UpstreamTradeStatus
from .address_verdict import AddressVerdict
from .enums import ANONYMOUS_OWNER, RateType, TradeStatus
from .quote import Quote
from .status_translation import UPSTREAM_STATUS_TABLE, translate_upstream_status

__all__ = [
    "ANONYMOUS_OWNER",
    "AddressVerdict",
    "Quote",
    "RateOffer",
    "RateType",
    "TradeStatus",
    "UPSTREAM_STATUS_TABLE",
    "UpstreamTrade",
    "UpstreamTradeStatus",
    "translate_upstream_status",
]
