"""ValidateAddress Query."""

from dataclasses import dataclass

from swap_service.application.shared import Query


@dataclass(frozen=True)
class ValidateAddressQuery(Query):
    address: str
    asset: str
    network: str
