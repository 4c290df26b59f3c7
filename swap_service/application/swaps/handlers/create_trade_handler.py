"""CreateTrade Handler - quote-to-trade binding.

Це CORE use case: consumed quote + upstream trade → durable local record.

Порядок кроків важливий:
1. PEEK quote (не consume) → validate address. Rejected address лишає
   quote usable.
2. CONSUME quote (exactly-once; concurrent callers → QuoteAlreadyUsed).
3. Upstream create-trade. НІКОЛИ не retry: outcome невідомий.
4. Persist CREATED trade. Retry з тими ж даними; DuplicateUpstreamId на
   retry означає що попередня спроба вже записала row → re-read.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable

from swap_service.application.shared import CommandHandler, UnitOfWork
from swap_service.application.swaps.commands import CreateTradeCommand
from swap_service.application.swaps.dtos import TradeDTO
from swap_service.application.swaps.services import AddressValidator
from swap_service.domain.swaps.entities import SwapTrade
from swap_service.domain.swaps.events import TradeBindingFailedEvent
from swap_service.domain.swaps.exceptions import (
    DuplicateUpstreamId,
    InvalidAddress,
    QuoteAlreadyUsed,
    QuoteNotFound,
    SwapError,
    TradePersistenceFailed,
)
from swap_service.domain.swaps.ports import AggregatorPort, QuoteCache
from swap_service.infrastructure.locking import KeyedLock
from swap_service.infrastructure.messaging import EventBus

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CreateTradeHandler(CommandHandler[CreateTradeCommand, TradeDTO]):
    """Handler для CreateTrade command.

    Example:
        >>> handler = CreateTradeHandler(
        ...     uow=unit_of_work,
        ...     quote_cache=quote_cache,
        ...     aggregator=aggregator,
        ...     validator=AddressValidator(aggregator),
        ...     event_bus=event_bus,
        ...     locks=get_trade_locks(),
        ... )
        >>> trade = await handler.handle(CreateTradeCommand(quote_token=token, address="4AbC..."))
        >>> trade.status  # "created"
    """

    def __init__(
        self,
        uow: UnitOfWork,
        quote_cache: QuoteCache,
        aggregator: AggregatorPort,
        validator: AddressValidator,
        event_bus: EventBus,
        locks: KeyedLock,
        persistence_max_retries: int = 3,
        persistence_retry_delay: float = 0.2,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize handler.

        Args:
            uow: Unit of Work для transaction management.
            quote_cache: Quote cache (peek + consume).
            aggregator: Aggregator port.
            validator: Address validator.
            event_bus: Event bus для publishing domain events.
            locks: Per-trade lock registry.
            persistence_max_retries: Спроби INSERT після upstream success.
            persistence_retry_delay: Base delay між спробами (linear).
            clock: Time source (tests).
        """
        self.uow = uow
        self.quote_cache = quote_cache
        self.aggregator = aggregator
        self.validator = validator
        self.event_bus = event_bus
        self.locks = locks
        self.persistence_max_retries = persistence_max_retries
        self.persistence_retry_delay = persistence_retry_delay
        self.clock = clock

    async def handle(self, command: CreateTradeCommand) -> TradeDTO:
        """Create trade.

        Raises:
            QuoteNotFound / QuoteExpired / QuoteAlreadyUsed: Quote unusable.
            InvalidAddress: Negative verdict (quote NOT consumed).
            ValidationUnavailable: Validator unreachable (quote NOT consumed).
            UpstreamRejected / UpstreamUnavailable: Upstream create failed.
            TradePersistenceFailed: Upstream trade exists, local record не збережений.
        """
        destination = command.address.strip()
        refund = command.refund_address.strip() if command.refund_address else None

        # ===== STEP 1: PEEK + VALIDATE =====
        try:
            quote = await self.quote_cache.peek(command.quote_token)
        except QuoteNotFound:
            # peek не відрізняє consumed від unknown
            if await self.quote_cache.is_consumed(command.quote_token):
                raise QuoteAlreadyUsed(
                    "Quote already used", quote_token=command.quote_token
                ) from None
            raise

        verdict = await self.validator.validate(destination, quote.to_asset, quote.to_network)
        if not verdict.valid:
            logger.info(
                "create_trade.invalid_address",
                extra={
                    "quote_token": command.quote_token,
                    "asset": quote.to_asset,
                    "network": quote.to_network,
                    "reason": verdict.reason,
                },
            )
            raise InvalidAddress(
                verdict.reason or "Destination address is not valid",
                reason=verdict.reason,
                asset=quote.to_asset,
                network=quote.to_network,
            )

        # ===== STEP 2: CONSUME =====
        quote = await self.quote_cache.consume(command.quote_token)

        logger.info(
            "create_trade.quote_consumed",
            extra={
                "quote_token": quote.quote_token,
                "provider": quote.provider,
                "owner": command.owner,
            },
        )

        # ===== STEP 3: UPSTREAM CREATE (never retried) =====
        try:
            upstream = await self.aggregator.create_trade(
                quote=quote,
                destination_address=destination,
                refund_address=refund,
                destination_extra_id=command.address_extra_id,
                refund_extra_id=command.refund_extra_id,
            )
        except SwapError as e:
            logger.warning(
                "create_trade.upstream_failed",
                extra={
                    "quote_token": quote.quote_token,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            )
            raise

        logger.info(
            "create_trade.upstream_success",
            extra={
                "quote_token": quote.quote_token,
                "upstream_trade_id": upstream.upstream_trade_id,
            },
        )

        # ===== STEP 4: PERSIST =====
        trade = SwapTrade.create_from_quote(
            quote=quote,
            upstream=upstream,
            destination_address=destination,
            refund_address=refund,
            owner=command.owner,
            destination_extra_id=command.address_extra_id,
            refund_extra_id=command.refund_extra_id,
            now=self.clock(),
        )

        async with self.locks.acquire(trade.trade_id):
            persisted = await self._persist_with_retry(trade)

        if persisted is trade:
            await self.event_bus.publish_all(trade.get_domain_events())
            trade.clear_domain_events()

        logger.info(
            "create_trade.completed",
            extra={
                "trade_id": persisted.trade_id,
                "upstream_trade_id": persisted.upstream_trade_id,
            },
        )
        return TradeDTO.from_entity(persisted)

    async def _persist_with_retry(self, trade: SwapTrade) -> SwapTrade:
        """INSERT trade; DuplicateUpstreamId → re-read existing row.

        Returns:
            `trade` якщо вставлений цим викликом, інакше existing row.
        """
        last_error: Exception | None = None

        for attempt in range(1, self.persistence_max_retries + 1):
            try:
                async with self.uow:
                    await self.uow.trades.insert(trade)
                    await self.uow.commit()
                return trade

            except DuplicateUpstreamId:
                return await self._recover_existing(trade)

            except SwapError:
                raise

            except Exception as e:
                last_error = e
                logger.warning(
                    "create_trade.persist_failed",
                    extra={
                        "trade_id": trade.trade_id,
                        "upstream_trade_id": trade.upstream_trade_id,
                        "attempt": attempt,
                        "max_retries": self.persistence_max_retries,
                        "error": str(e),
                    },
                )

            if attempt < self.persistence_max_retries:
                await asyncio.sleep(self.persistence_retry_delay * attempt)

        await self._report_binding_failure(trade, str(last_error))
        raise TradePersistenceFailed(
            "Trade was created upstream but could not be recorded",
            upstream_trade_id=trade.upstream_trade_id,
            deposit_address=trade.deposit_address,
        )

    async def _recover_existing(self, trade: SwapTrade) -> SwapTrade:
        """Existing row тієї ж binding, або TradePersistenceFailed.

        Unique violation без row з цим upstream id означає конфлікт по
        quote_token: повторний INSERT його не виправить.
        """
        async with self.uow:
            existing = await self.uow.trades.get_by_upstream_id(trade.upstream_trade_id)

        if existing is None:
            reason = "quote token already bound to another trade"
            await self._report_binding_failure(trade, reason)
            raise TradePersistenceFailed(
                "Quote token is already bound to another trade",
                upstream_trade_id=trade.upstream_trade_id,
                quote_token=trade.quote_token,
            )

        if existing.quote_token != trade.quote_token:
            # Upstream reused an id already bound to another quote
            reason = f"upstream trade id already bound to trade {existing.trade_id}"
            await self._report_binding_failure(trade, reason)
            raise TradePersistenceFailed(
                "Upstream trade id is already bound to another trade",
                upstream_trade_id=trade.upstream_trade_id,
                existing_trade_id=existing.trade_id,
            )

        logger.info(
            "create_trade.duplicate_recovered",
            extra={
                "trade_id": existing.trade_id,
                "upstream_trade_id": existing.upstream_trade_id,
            },
        )
        return existing

    async def _report_binding_failure(self, trade: SwapTrade, reason: str) -> None:
        logger.error(
            "create_trade.binding_failed",
            extra={
                "upstream_trade_id": trade.upstream_trade_id,
                "quote_token": trade.quote_token,
                "deposit_address": trade.deposit_address,
                "owner": trade.owner,
                "reason": reason,
            },
        )
        await self.event_bus.publish(
            TradeBindingFailedEvent(
                upstream_trade_id=trade.upstream_trade_id,
                quote_token=trade.quote_token,
                deposit_address=trade.deposit_address,
                owner=trade.owner,
                reason=reason,
            )
        )
