"""SwapTrade Mapper - converts between SwapTrade entity and SwapTradeModel ORM."""

import logging
from datetime import datetime, timezone

from swap_service.domain.swaps.entities import SwapTrade
from swap_service.domain.swaps.value_objects import RateType, TradeStatus
from swap_service.infrastructure.persistence.sqlalchemy.models import SwapTradeModel

logger = logging.getLogger(__name__)


def _aware(value: datetime | None) -> datetime | None:
    """Drivers без tz support (SQLite) повертають naive UTC datetime."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class SwapTradeMapper:
    """Mapper для SwapTrade entity ↔ SwapTradeModel ORM.

    Example:
        >>> mapper = SwapTradeMapper()
        >>> model = mapper.to_model(trade)  # Domain → ORM
        >>> trade_back = mapper.to_entity(model)  # ORM → Domain
    """

    def to_entity(self, model: SwapTradeModel) -> SwapTrade:
        """Convert ORM SwapTradeModel → Domain SwapTrade entity."""
        trade = SwapTrade(
            trade_id=model.trade_id,
            upstream_trade_id=model.upstream_trade_id,
            owner=model.owner,
            quote_token=model.quote_token,
            from_asset=model.from_asset,
            to_asset=model.to_asset,
            from_network=model.from_network,
            to_network=model.to_network,
            amount=model.amount,
            provider=model.provider,
            rate_type=RateType(model.rate_type),
            quoted_rate=model.quoted_rate,
            quoted_output_amount=model.quoted_output_amount,
            deposit_address=model.deposit_address,
            deposit_extra_id=model.deposit_extra_id,
            destination_address=model.destination_address,
            destination_extra_id=model.destination_extra_id,
            refund_address=model.refund_address,
            refund_extra_id=model.refund_extra_id,
            status=TradeStatus(model.status),
            upstream_status=model.upstream_status,
            upstream_amount_to=model.upstream_amount_to,
            created_at=_aware(model.created_at),
            last_checked_at=_aware(model.last_checked_at),
            terminal_at=_aware(model.terminal_at),
            version=model.version,
        )

        # ВАЖЛИВО: Clear domain events (не хочемо replay events з DB)
        trade.clear_domain_events()

        return trade

    def to_model(self, entity: SwapTrade) -> SwapTradeModel:
        """Convert Domain SwapTrade entity → ORM SwapTradeModel (INSERT)."""
        return SwapTradeModel(
            trade_id=entity.trade_id,
            upstream_trade_id=entity.upstream_trade_id,
            quote_token=entity.quote_token,
            owner=entity.owner,
            from_asset=entity.from_asset,
            to_asset=entity.to_asset,
            from_network=entity.from_network,
            to_network=entity.to_network,
            amount=entity.amount,
            provider=entity.provider,
            rate_type=entity.rate_type.value,
            quoted_rate=entity.quoted_rate,
            quoted_output_amount=entity.quoted_output_amount,
            deposit_address=entity.deposit_address,
            deposit_extra_id=entity.deposit_extra_id,
            destination_address=entity.destination_address,
            destination_extra_id=entity.destination_extra_id,
            refund_address=entity.refund_address,
            refund_extra_id=entity.refund_extra_id,
            status=entity.status.value,
            upstream_status=entity.upstream_status,
            upstream_amount_to=entity.upstream_amount_to,
            created_at=entity.created_at,
            last_checked_at=entity.last_checked_at,
            terminal_at=entity.terminal_at,
            version=entity.version,
        )

    def update_model_from_entity(
        self, model: SwapTradeModel, entity: SwapTrade
    ) -> bool:
        """Copy reconciliation state entity → існуючий model.

        Status перевіряється state machine ще раз на write path: якщо row
        вже пішов далі (інший процес), stored status не переписується.

        Returns:
            True якщо status в model змінився.
        """
        stored = TradeStatus(model.status)
        status_changed = False

        if entity.status != stored:
            if stored.can_transition_to(entity.status):
                model.status = entity.status.value
                model.terminal_at = entity.terminal_at
                status_changed = True
            else:
                logger.warning(
                    "swap_trade_mapper.stale_write_rejected",
                    extra={
                        "trade_id": entity.trade_id,
                        "stored_status": stored.value,
                        "attempted_status": entity.status.value,
                    },
                )

        model.upstream_status = entity.upstream_status
        model.upstream_amount_to = entity.upstream_amount_to

        checked = _aware(model.last_checked_at)
        if checked is None or entity.last_checked_at > checked:
            model.last_checked_at = entity.last_checked_at

        # Increment version (optimistic locking)
        model.version += 1
        entity.version = model.version

        return status_changed
