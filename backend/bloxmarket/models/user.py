"""User ORM — identity registry rows and their session tokens.

Invariants:
    - username and email each carry a unique index (datastore-enforced uniqueness)
    - email is stored lowercased (normalized in schemas/user.py)
    - role == 'banned' <=> ban_reason and banned_at are non-null
    - version increments on every compare-and-swap write (role/ban group)

Design Decisions:
    - Tokens in their own table: append/revoke are single INSERT/DELETE statements,
      no read-modify-write of a JSON array
    - No ORM relationships: references are plain FK columns plus indexes
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from bloxmarket.core.domain_types import (
    BIO_MAX, EMAIL_MAX, HANDLE_MAX, USERNAME_MAX, UserRole,
)
from bloxmarket.db.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    """Registered account."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "(role = 'banned') = (ban_reason IS NOT NULL AND banned_at IS NOT NULL)",
            name="ck_users_ban_group",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    username: Mapped[str] = mapped_column(
        String(USERNAME_MAX), nullable=False, unique=True, index=True,
    )
    email: Mapped[str] = mapped_column(
        String(EMAIL_MAX), nullable=False, unique=True, index=True,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    roblox_username: Mapped[str | None] = mapped_column(
        String(HANDLE_MAX), nullable=True,
    )
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    credibility_score: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserRole.USER.value,
    )
    bio: Mapped[str | None] = mapped_column(String(BIO_MAX), nullable=True)
    discord_username: Mapped[str | None] = mapped_column(
        String(HANDLE_MAX), nullable=True,
    )
    timezone: Mapped[str | None] = mapped_column(
        String(HANDLE_MAX), nullable=True,
    )
    verification_requested: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    middleman_requested: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )

    # Ban group — written together by enforce_ban.plan_role_change
    ban_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    banned_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    last_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class UserToken(Base):
    """Issued session token, ordered by issued_at."""
    __tablename__ = "user_tokens"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    token: Mapped[str] = mapped_column(String(255), nullable=False)
    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
