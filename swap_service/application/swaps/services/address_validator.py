"""Address Validator - delegates до aggregator, ніколи не "valid" by default."""

import logging

from swap_service.domain.swaps.exceptions import UpstreamUnavailable, ValidationUnavailable
from swap_service.domain.swaps.ports import AggregatorPort
from swap_service.domain.swaps.value_objects import AddressVerdict

logger = logging.getLogger(__name__)


class AddressValidator:
    """Validate destination addresses through the aggregator.

    Без coin-specific logic: formats різних мереж знає тільки aggregator.
    Adapter вже retry-ить read-only calls, тому тут лишається тільки
    mapping final failure → ValidationUnavailable.

    Example:
        >>> validator = AddressValidator(aggregator)
        >>> verdict = await validator.validate("4AbC...", "xmr", "Mainnet")
        >>> verdict.valid  # True
    """

    def __init__(self, aggregator: AggregatorPort) -> None:
        self.aggregator = aggregator

    async def validate(self, address: str, asset: str, network: str) -> AddressVerdict:
        """Validate address для asset/network.

        Raises:
            ValidationUnavailable: Aggregator unreachable або malformed response.
        """
        address = (address or "").strip()
        asset = (asset or "").strip().lower()
        network = (network or "").strip()

        if not address:
            return AddressVerdict(valid=False, reason="Address is empty")

        try:
            verdict = await self.aggregator.validate_address(address, asset, network)
        except UpstreamUnavailable as e:
            logger.warning(
                "address_validator.unavailable",
                extra={"asset": asset, "network": network, "error": str(e)},
            )
            raise ValidationUnavailable(
                "Address validation is unavailable, try again later",
                asset=asset,
                network=network,
            ) from e

        logger.info(
            "address_validator.verdict",
            extra={"asset": asset, "network": network, "valid": verdict.valid},
        )
        return verdict
