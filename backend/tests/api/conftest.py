"""API test fixtures — ASGI client against the real app factory.

Design Decisions:
    - ASGITransport does not run the lifespan, so tests install db_manager
      themselves instead of touching a real database
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

import bloxmarket.infrastructure.database as db_module
from bloxmarket.infrastructure.database import DatabaseSessionManager
from bloxmarket.main import create_app


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
async def sqlite_manager(monkeypatch):
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    manager = DatabaseSessionManager.from_engine(engine)
    monkeypatch.setattr(db_module, "db_manager", manager)
    yield manager
    await engine.dispose()
