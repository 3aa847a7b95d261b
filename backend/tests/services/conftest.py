"""Service test fixtures — in-memory database, controllable clock, repository bundle.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Repositories are built through build_repositories, exactly as the app does
    - The clock only moves when a test calls advance()

Design Decisions:
    - StaticPool: every session shares the one connection that holds the
      in-memory database
    - SQLite drops tzinfo on read; assertions on stored datetimes go through as_utc
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

import bloxmarket.models  # noqa: F401 — registers every table on Base.metadata
from bloxmarket.db.base import Base
from bloxmarket.infrastructure.database import DatabaseSessionManager
from bloxmarket.services.repositories import build_repositories

EPOCH = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock; tests move it explicitly."""

    def __init__(self, start: datetime = EPOCH):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now += timedelta(**delta)
        return self.now


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def sessions(test_engine):
    return DatabaseSessionManager.from_engine(test_engine)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repos(sessions, clock):
    return build_repositories(sessions, clock, max_attempts=3)


@pytest.fixture
async def alice(repos):
    return await repos.users.create("alice", "alice@example.com", "hash-a")


@pytest.fixture
async def bob(repos):
    return await repos.users.create("bob", "bob@example.com", "hash-b")


@pytest.fixture
async def carol(repos):
    return await repos.users.create("carol", "carol@example.com", "hash-c")
