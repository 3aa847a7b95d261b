"""SQLAlchemy Declarative Base — shared base class and timestamp mixin for all ORM models.

Invariants:
    - All models inherit from Base
    - Base is the single source of truth for table metadata
    - TimestampMixin rows always carry created_at/updated_at (UTC, aware)

Design Decisions:
    - Separate file for Base: avoids circular imports between models
    - Python-side defaults (not server_default): values are visible before refresh
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all BloxMarket ORM models."""
    pass


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )
