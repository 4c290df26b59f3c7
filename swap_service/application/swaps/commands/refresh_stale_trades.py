"""RefreshStaleTrades Command - background reconciliation sweep."""

from dataclasses import dataclass

from swap_service.application.shared import Command


@dataclass(frozen=True)
class RefreshStaleTradesCommand(Command):
    """Refresh non-terminal trades чий last_checked_at старший за threshold."""

    limit: int | None = None
    """Max trades per sweep (None → STATUS_SWEEP_BATCH_SIZE)."""
