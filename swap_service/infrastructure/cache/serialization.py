"""Quote <-> JSON для shared cache backends.

Decimal зберігається як string (без втрати точності), datetime - ISO 8601.
"""

import json
from datetime import datetime
from decimal import Decimal
from typing import Any

from swap_service.domain.swaps.value_objects import Quote, RateType

_DECIMAL_FIELDS = (
    "amount",
    "quoted_rate",
    "quoted_output_amount",
    "min_amount",
    "max_amount",
    "provider_fee",
)
_DATETIME_FIELDS = ("issued_at", "expires_at")


def quote_to_json(quote: Quote) -> str:
    data: dict[str, Any] = {
        "quote_token": quote.quote_token,
        "from_asset": quote.from_asset,
        "to_asset": quote.to_asset,
        "from_network": quote.from_network,
        "to_network": quote.to_network,
        "provider": quote.provider,
        "rate_type": quote.rate_type.value,
        "kyc_rating": quote.kyc_rating,
        "eta_minutes": quote.eta_minutes,
        "upstream_rate_id": quote.upstream_rate_id,
    }
    for name in _DECIMAL_FIELDS:
        value = getattr(quote, name)
        data[name] = None if value is None else str(value)
    for name in _DATETIME_FIELDS:
        data[name] = getattr(quote, name).isoformat()
    return json.dumps(data)


def quote_from_json(raw: str | bytes) -> Quote:
    data = json.loads(raw)
    for name in _DECIMAL_FIELDS:
        if data.get(name) is not None:
            data[name] = Decimal(data[name])
    for name in _DATETIME_FIELDS:
        data[name] = datetime.fromisoformat(data[name])
    data["rate_type"] = RateType(data.get("rate_type", RateType.FLOATING.value))
    return Quote(**data)
