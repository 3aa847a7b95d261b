"""Database Session Manager — async engine, transactional sessions, readiness ping.

Invariants:
    - Every session rolls back on any exception before it propagates
    - BloxMarketError raised inside a session propagates unchanged
    - Any other SQLAlchemyError leaves as DatabaseError (core/errors.py), tagged with
      the kind of operation that failed

Design Decisions:
    - One manager per process (init_db in the lifespan); repositories receive it
      through build_repositories rather than importing the module global
    - from_engine(): tests wrap an in-memory engine without re-pooling
    - expire_on_commit=False: records are built from rows after commit
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)

from bloxmarket.core.errors import BloxMarketError, DatabaseError

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError and OperationalError are DBAPIErrors
_FAILURE_KINDS: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "commit", "Integrity constraint violated"),
    (OperationalError, "execute", "Connection or operational error"),
    (DBAPIError, "query", "Database driver error"),
    (SQLAlchemyError, "unknown", "Database operation failed"),
)


def to_database_error(exc: SQLAlchemyError) -> DatabaseError:
    for kind, operation, message in _FAILURE_KINDS:
        if isinstance(exc, kind):
            return DatabaseError(message, operation)
    return DatabaseError("Database operation failed", "unknown")


class DatabaseSessionManager:
    """Owns the engine and hands out sessions that never leak a half transaction."""

    def __init__(self, database_url: str, **engine_options):
        self._bind(create_async_engine(
            database_url, pool_pre_ping=True, **engine_options,
        ))

    @classmethod
    def from_engine(cls, engine: AsyncEngine) -> "DatabaseSessionManager":
        manager = cls.__new__(cls)
        manager._bind(engine)
        return manager

    def _bind(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except BloxMarketError:
            await session.rollback()
            raise
        except SQLAlchemyError as exc:
            await session.rollback()
            error = to_database_error(exc)
            logger.error(
                f"{type(exc).__name__} during {error.operation}: {exc}",
                extra={"error_code": error.code},
            )
            raise error from exc
        finally:
            await session.close()

    async def health_check(self) -> bool:
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except Exception as exc:
            logger.error(f"Database ping failed: {exc}")
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


# Set by init_db during the FastAPI lifespan; read by the readiness probe
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **engine_options) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **engine_options)
    return db_manager
