"""Address validation DTO."""

from dataclasses import dataclass


@dataclass
class AddressValidationDTO:
    valid: bool
    reason: str | None = None
