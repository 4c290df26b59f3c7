"""Background sweep summary."""

from dataclasses import dataclass


@dataclass
class RefreshSummaryDTO:
    """Результат одного sweep.

    checked: trades пройшли через reconciler
    changed: status змінився
    stale: persistence exhausted (last-known returned)
    failed: upstream unavailable / інша swap error
    """

    checked: int = 0
    changed: int = 0
    stale: int = 0
    failed: int = 0
