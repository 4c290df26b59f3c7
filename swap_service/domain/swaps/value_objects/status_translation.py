"""Upstream status vocabulary → local TradeStatus."""

import logging

from .enums import TradeStatus

logger = logging.getLogger(__name__)

UPSTREAM_STATUS_TABLE: dict[str, TradeStatus] = {
    "new": TradeStatus.CREATED,
    "waiting": TradeStatus.WAITING_DEPOSIT,
    "confirming": TradeStatus.CONFIRMING,
    "sending": TradeStatus.EXCHANGING,
    "exchanging": TradeStatus.EXCHANGING,
    "finished": TradeStatus.FINISHED,
    "failed": TradeStatus.FAILED,
    "halted": TradeStatus.FAILED,
    "refunded": TradeStatus.REFUNDED,
    "expired": TradeStatus.EXPIRED,
}


def translate_upstream_status(upstream_status: str | None) -> TradeStatus:
    """Translate upstream status string to local status.

    Args:
        upstream_status: Raw status from the aggregator (case-insensitive).

    Returns:
        Mapped TradeStatus, або TradeStatus.UNKNOWN для нового/порожнього
        upstream vocabulary.
    """
    key = (upstream_status or "").strip().lower()
    status = UPSTREAM_STATUS_TABLE.get(key)
    if status is None:
        logger.warning(
            "status_translation.unrecognized",
            extra={"upstream_status": upstream_status},
        )
        return TradeStatus.UNKNOWN
    return status
