"""Trade ORM — trade listings, image URLs, comments, ratings and votes.

Invariants:
    - Always owned by a User (owner_id FK, indexed)
    - status follows core/enforce_transitions.TRADE_TRANSITIONS
    - Images are ordered by uploaded_at; the upload service owns the bytes
    - (trade_id, user_id) unique on trade_votes; (trade_id, rater_id) unique on
      trade_ratings; rating is 1-5

Design Decisions:
    - version column: status transitions are compare-and-swap writes
    - Child rows cascade with their trade at the DB level; the repository also
      deletes them explicitly so SQLite (no FK enforcement by default) agrees
    - Comment and vote rows name their parent target_id in Python so one
      feedback repository serves trades and events alike
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from bloxmarket.core.domain_types import TradeStatus
from bloxmarket.db.base import Base, TimestampMixin


class Trade(TimestampMixin, Base):
    """Trade listing."""
    __tablename__ = "trades"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    item_offered: Mapped[str] = mapped_column(Text, nullable=False)
    item_requested: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TradeStatus.OPEN.value, index=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class TradeImage(Base):
    __tablename__ = "trade_images"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    trade_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("trades.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    url: Mapped[str] = mapped_column(Text, nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )


class TradeComment(TimestampMixin, Base):
    __tablename__ = "trade_comments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    target_id: Mapped[uuid.UUID] = mapped_column(
        "trade_id", UUID(as_uuid=True), ForeignKey("trades.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)


class TradeRating(TimestampMixin, Base):
    """Rater's 1-5 score for the trade owner."""
    __tablename__ = "trade_ratings"
    __table_args__ = (
        UniqueConstraint("trade_id", "rater_id", name="uq_trade_rating"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_trade_ratings_range"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    trade_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("trades.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    rater_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    rated_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)


class TradeVote(TimestampMixin, Base):
    __tablename__ = "trade_votes"
    __table_args__ = (
        UniqueConstraint("trade_id", "user_id", name="uq_trade_vote"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    target_id: Mapped[uuid.UUID] = mapped_column(
        "trade_id", UUID(as_uuid=True), ForeignKey("trades.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    direction: Mapped[str] = mapped_column("vote_type", String(10), nullable=False)
