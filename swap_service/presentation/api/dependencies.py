"""Dependency injection for FastAPI.

Provides dependencies для API routes:
- Unit of Work (per request)
- Handlers (GetRates, CreateTrade, GetTradeStatus, ValidateAddress)
- Aggregator, quote cache, event bus, per-trade locks (process singletons)
- Owner resolution з optional Bearer token
"""

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from swap_service.application.swaps.handlers import (
    CreateTradeHandler,
    GetRatesHandler,
    GetTradeStatusHandler,
    ValidateAddressHandler,
)
from swap_service.application.swaps.services import AddressValidator, StatusReconciler
from swap_service.config import Settings, get_settings
from swap_service.domain.swaps.ports import AggregatorPort, QuoteCache
from swap_service.domain.swaps.value_objects import ANONYMOUS_OWNER
from swap_service.infrastructure.auth import get_jwt_manager
from swap_service.infrastructure.locking import KeyedLock, get_trade_locks
from swap_service.infrastructure.messaging import EventBus, get_event_bus
from swap_service.infrastructure.persistence.sqlalchemy import (
    SQLAlchemyUnitOfWork,
    create_unit_of_work,
)

# ============================================================================
# GLOBAL DEPENDENCIES (будуть initialized в main.py)
# ============================================================================

_session_factory: async_sessionmaker[AsyncSession] | None = None
_aggregator: AggregatorPort | None = None
_quote_cache: QuoteCache | None = None
_settings: Settings | None = None
_event_bus: EventBus | None = None
_locks: KeyedLock | None = None


def init_dependencies(
    session_factory: async_sessionmaker[AsyncSession],
    aggregator: AggregatorPort,
    quote_cache: QuoteCache,
    settings: Settings | None = None,
    event_bus: EventBus | None = None,
    locks: KeyedLock | None = None,
) -> None:
    """Initialize global dependencies.

    Args:
        session_factory: SQLAlchemy async session factory.
        aggregator: Aggregator adapter (shared - тримає rate limiter + breaker).
        quote_cache: Quote cache backend.
        settings: Settings override (tests).
        event_bus: Event bus override (tests).
        locks: Per-trade lock registry override (tests).

    Note:
        Викликається при FastAPI startup (в main.py).
    """
    global _session_factory, _aggregator, _quote_cache, _settings, _event_bus, _locks
    _session_factory = session_factory
    _aggregator = aggregator
    _quote_cache = quote_cache
    _settings = settings or get_settings()
    _event_bus = event_bus or get_event_bus()
    _locks = locks or get_trade_locks()


def _require(value, name: str):
    if value is None:
        raise RuntimeError(
            f"Dependency '{name}' not initialized. Call init_dependencies() first."
        )
    return value


# ============================================================================
# OWNER
# ============================================================================


async def get_owner(
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """Resolve owner reference з Authorization header.

    Token optional: відсутній або невалідний token → anonymous owner.
    Swaps не вимагають account.
    """
    if not authorization:
        return ANONYMOUS_OWNER

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return ANONYMOUS_OWNER

    owner = get_jwt_manager().resolve_owner(parts[1])
    return owner or ANONYMOUS_OWNER


# ============================================================================
# SHARED SINGLETONS
# ============================================================================


async def get_unit_of_work() -> SQLAlchemyUnitOfWork:
    """Get Unit of Work instance (новий для кожного request)."""
    return create_unit_of_work(_require(_session_factory, "session_factory"))


async def get_aggregator() -> AggregatorPort:
    return _require(_aggregator, "aggregator")


async def get_quote_cache() -> QuoteCache:
    return _require(_quote_cache, "quote_cache")


async def get_app_settings() -> Settings:
    return _require(_settings, "settings")


def _reconciler(uow: SQLAlchemyUnitOfWork, aggregator: AggregatorPort) -> StatusReconciler:
    settings = _require(_settings, "settings")
    return StatusReconciler(
        uow=uow,
        aggregator=aggregator,
        event_bus=_require(_event_bus, "event_bus"),
        locks=_require(_locks, "locks"),
        refresh_threshold=settings.status_refresh_threshold,
        deposit_window=settings.deposit_window,
        persistence_max_retries=settings.persistence_max_retries,
        persistence_retry_delay=settings.persistence_retry_delay,
    )


# ============================================================================
# HANDLERS
# ============================================================================


async def get_rates_handler(
    aggregator: Annotated[AggregatorPort, Depends(get_aggregator)],
    quote_cache: Annotated[QuoteCache, Depends(get_quote_cache)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> GetRatesHandler:
    return GetRatesHandler(
        aggregator=aggregator,
        quote_cache=quote_cache,
        quote_ttl_seconds=settings.quote_ttl_seconds,
    )


async def get_create_trade_handler(
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)],
    aggregator: Annotated[AggregatorPort, Depends(get_aggregator)],
    quote_cache: Annotated[QuoteCache, Depends(get_quote_cache)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> CreateTradeHandler:
    """Get CreateTradeHandler instance.

    Note:
        Handler створюється для кожного request з injected dependencies.
    """
    return CreateTradeHandler(
        uow=uow,
        quote_cache=quote_cache,
        aggregator=aggregator,
        validator=AddressValidator(aggregator),
        event_bus=_require(_event_bus, "event_bus"),
        locks=_require(_locks, "locks"),
        persistence_max_retries=settings.persistence_max_retries,
        persistence_retry_delay=settings.persistence_retry_delay,
    )


async def get_trade_status_handler(
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)],
    aggregator: Annotated[AggregatorPort, Depends(get_aggregator)],
) -> GetTradeStatusHandler:
    return GetTradeStatusHandler(reconciler=_reconciler(uow, aggregator))


async def get_validate_address_handler(
    aggregator: Annotated[AggregatorPort, Depends(get_aggregator)],
) -> ValidateAddressHandler:
    return ValidateAddressHandler(validator=AddressValidator(aggregator))


# ============================================================================
# TYPE ALIASES (для cleaner route signatures)
# ============================================================================

Owner = Annotated[str, Depends(get_owner)]

GetRatesHandlerDep = Annotated[GetRatesHandler, Depends(get_rates_handler)]
CreateTradeHandlerDep = Annotated[CreateTradeHandler, Depends(get_create_trade_handler)]
GetTradeStatusHandlerDep = Annotated[
    GetTradeStatusHandler, Depends(get_trade_status_handler)
]
ValidateAddressHandlerDep = Annotated[
    ValidateAddressHandler, Depends(get_validate_address_handler)
]
