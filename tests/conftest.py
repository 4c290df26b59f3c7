"""Pytest configuration and fixtures."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from swap_service.infrastructure.cache import InMemoryQuoteCache
from swap_service.infrastructure.locking import KeyedLock
from swap_service.infrastructure.messaging import EventBus
from swap_service.infrastructure.persistence.sqlalchemy import Base
from tests.fakes import FakeAggregator, FakeClock, make_quote


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def aggregator() -> FakeAggregator:
    return FakeAggregator()


@pytest.fixture
def quote_cache(clock) -> InMemoryQuoteCache:
    return InMemoryQuoteCache(clock=clock)


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def locks() -> KeyedLock:
    return KeyedLock()


@pytest.fixture
def sample_quote():
    """Fresh quote issued at the FakeClock start time."""
    return make_quote()


@pytest.fixture
async def engine():
    """In-memory SQLite engine (StaticPool: одна connection на test)."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
