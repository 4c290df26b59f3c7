"""ValidateAddress Handler."""

from swap_service.application.shared import QueryHandler
from swap_service.application.swaps.dtos import AddressValidationDTO
from swap_service.application.swaps.queries import ValidateAddressQuery
from swap_service.application.swaps.services import AddressValidator


class ValidateAddressHandler(QueryHandler[ValidateAddressQuery, AddressValidationDTO]):
    """Expose AddressValidator directly (pre-flight check перед create)."""

    def __init__(self, validator: AddressValidator) -> None:
        self.validator = validator

    async def handle(self, query: ValidateAddressQuery) -> AddressValidationDTO:
        verdict = await self.validator.validate(query.address, query.asset, query.network)
        return AddressValidationDTO(valid=verdict.valid, reason=verdict.reason)
