"""Test doubles and builders shared by test modules.

Fakes тут замінюють тільки зовнішній aggregator: persistence у tests -
справжній SQLAlchemy stack на in-memory SQLite.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from itertools import count

from jose import jwt

from swap_service.config import get_settings
from swap_service.domain.swaps.entities import SwapTrade
from swap_service.domain.swaps.ports import AggregatorPort
from swap_service.domain.swaps.value_objects import (
    AddressVerdict,
    Quote,
    RateOffer,
    RateType,
    TradeStatus,
    UpstreamTrade,
    UpstreamTradeStatus,
)
from swap_service.infrastructure.persistence.sqlalchemy import (
    SQLAlchemyTradeRepository,
    SQLAlchemyUnitOfWork,
)

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable clock (callable, як datetime.now)."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class FakeAggregator(AggregatorPort):
    """In-process aggregator з програмованими відповідями."""

    def __init__(self) -> None:
        self.offers: list[RateOffer] = []
        self.statuses: dict[str, str] = {}
        self.invalid_addresses: dict[str, str] = {}

        self.rates_error: Exception | None = None
        self.create_error: Exception | None = None
        self.status_error: Exception | None = None
        self.validate_error: Exception | None = None

        self.create_calls: list[dict] = []
        self.status_calls: list[str] = []
        self.validate_calls: list[tuple[str, str, str]] = []
        self._ids = count(1)

    async def get_rates(
        self,
        from_asset,
        to_asset,
        amount,
        network_from,
        network_to,
        rate_type=RateType.FLOATING,
    ) -> list[RateOffer]:
        if self.rates_error:
            raise self.rates_error
        return list(self.offers)

    async def create_trade(
        self,
        quote,
        destination_address,
        refund_address,
        destination_extra_id=None,
        refund_extra_id=None,
    ) -> UpstreamTrade:
        self.create_calls.append(
            {
                "quote_token": quote.quote_token,
                "destination_address": destination_address,
                "refund_address": refund_address,
            }
        )
        if self.create_error:
            raise self.create_error
        upstream_id = f"UP{next(self._ids)}"
        self.statuses.setdefault(upstream_id, "new")
        return UpstreamTrade(
            upstream_trade_id=upstream_id,
            deposit_address=f"bc1qdeposit{upstream_id.lower()}",
            amount_to=quote.quoted_output_amount,
            status="new",
        )

    async def get_trade_status(self, upstream_trade_id: str) -> UpstreamTradeStatus:
        self.status_calls.append(upstream_trade_id)
        if self.status_error:
            raise self.status_error
        return UpstreamTradeStatus(
            upstream_trade_id=upstream_trade_id,
            status=self.statuses.get(upstream_trade_id, "new"),
        )

    async def validate_address(self, address: str, asset: str, network: str) -> AddressVerdict:
        self.validate_calls.append((address, asset, network))
        if self.validate_error:
            raise self.validate_error
        if address in self.invalid_addresses:
            return AddressVerdict(valid=False, reason=self.invalid_addresses[address])
        return AddressVerdict(valid=True)


def make_offer(provider: str, amount_to: str, token: str | None = None) -> RateOffer:
    return RateOffer(
        quote_token=token or f"R1:{provider}",
        provider=provider,
        amount_from=Decimal("0.1"),
        amount_to=Decimal(amount_to),
        upstream_rate_id="R1",
    )


def make_quote(
    token: str = "R1:changenow",
    issued_at: datetime = T0,
    ttl_seconds: int = 120,
    **overrides,
) -> Quote:
    data = {
        "quote_token": token,
        "from_asset": "btc",
        "to_asset": "xmr",
        "from_network": "Mainnet",
        "to_network": "Mainnet",
        "amount": Decimal("0.1"),
        "provider": "changenow",
        "quoted_rate": Decimal("61"),
        "quoted_output_amount": Decimal("6.1"),
        "issued_at": issued_at,
        "expires_at": issued_at + timedelta(seconds=ttl_seconds),
    }
    data.update(overrides)
    return Quote(**data)


class FlakyUnitOfWork(SQLAlchemyUnitOfWork):
    """SQLAlchemy UoW, commit якого падає задану кількість разів.

    fail_before_commit: commit не відбувається, raise.
    fail_after_commit: commit відбувається, потім raise (втрачена відповідь).
    """

    def __init__(self, session_factory, fail_before_commit: int = 0, fail_after_commit: int = 0):
        super().__init__(session_factory)
        self.fail_before_commit = fail_before_commit
        self.fail_after_commit = fail_after_commit
        self.commit_attempts = 0

    async def commit(self) -> None:
        self.commit_attempts += 1
        if self.fail_before_commit > 0:
            self.fail_before_commit -= 1
            raise ConnectionError("database connection lost")

        await super().commit()

        if self.fail_after_commit > 0:
            self.fail_after_commit -= 1
            raise ConnectionError("connection dropped after commit")


class _FlakyReadRepository(SQLAlchemyTradeRepository):
    def __init__(self, session, uow: "FlakyReadUnitOfWork") -> None:
        super().__init__(session)
        self._uow = uow

    async def get_by_id(self, trade_id: str, for_update: bool = False):
        if not for_update and self._uow.fail_reads > 0:
            self._uow.fail_reads -= 1
            raise ConnectionError("db hiccup")
        return await super().get_by_id(trade_id, for_update=for_update)


class FlakyReadUnitOfWork(SQLAlchemyUnitOfWork):
    """SQLAlchemy UoW, plain get_by_id якого падає перші `fail_reads` разів."""

    def __init__(self, session_factory, fail_reads: int = 0):
        super().__init__(session_factory)
        self.fail_reads = fail_reads

    @property
    def trades(self):
        if self._session is None:
            raise RuntimeError("Unit of Work not started (use async with)")
        if self._trades is None:
            self._trades = _FlakyReadRepository(self._session, self)
        return self._trades


async def seed_trade(
    session_factory,
    upstream_id: str = "UP1",
    status: TradeStatus = TradeStatus.CREATED,
    checked_at=T0,
) -> SwapTrade:
    trade = SwapTrade.create_from_quote(
        quote=make_quote(token=f"R-{upstream_id}:changenow"),
        upstream=UpstreamTrade(upstream_trade_id=upstream_id, deposit_address="bc1qdeposit"),
        destination_address="4Ab3xmr",
        refund_address="1QxBtc",
        owner="42",
        now=T0,
    )
    if status is not TradeStatus.CREATED:
        trade.transition_to(status, checked_at=checked_at)
    trade.last_checked_at = checked_at

    async with SQLAlchemyUnitOfWork(session_factory) as uow:
        await uow.trades.insert(trade)
        await uow.commit()
    return trade


async def load(session_factory, trade_id: str) -> SwapTrade:
    async with SQLAlchemyUnitOfWork(session_factory) as uow:
        return await uow.trades.get_by_id(trade_id)


def make_access_token(
    claims: dict,
    secret_key: str | None = None,
    expires_delta: timedelta = timedelta(hours=1),
) -> str:
    """Signed access token, як його видає identity service."""
    settings = get_settings()
    payload = {
        "exp": datetime.now(timezone.utc) + expires_delta,
        "type": "access",
        **claims,
    }
    return jwt.encode(
        payload, secret_key or settings.secret_key, algorithm=settings.jwt_algorithm
    )
