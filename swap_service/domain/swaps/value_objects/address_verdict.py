"""AddressVerdict value object - нормалізований результат address validation."""

from dataclasses import dataclass

from swap_service.domain.shared import ValueObject


@dataclass(frozen=True)
class AddressVerdict(ValueObject):
    """Verdict aggregator-а щодо destination address.

    Example:
        >>> AddressVerdict(valid=False, reason="Address is not valid for xmr/Mainnet")
    """

    valid: bool
    reason: str | None = None
