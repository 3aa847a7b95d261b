"""Event ORM — time-bounded campaigns, their roster, comments and votes.

Invariants:
    - participant_count == number of event_participants rows for the event
    - (event_id, user_id) unique: a user appears on a roster at most once
    - (event_id, user_id) unique on event_votes: one vote per user per event
    - status is the write-time snapshot from core/derive_event_status.py
    - version increments on every roster write (compare-and-swap)

Design Decisions:
    - participant_count denormalized: capacity check reads one row, not a COUNT(*)
    - JSON for prizes/requirements: ordered string lists, never queried by element
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    JSON, CheckConstraint, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from bloxmarket.core.domain_types import TITLE_MAX, EventStatus, EventType
from bloxmarket.db.base import Base, TimestampMixin


class Event(TimestampMixin, Base):
    """Giveaway, competition or general event."""
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint(
            "max_participants IS NULL OR participant_count <= max_participants",
            name="ck_events_capacity",
        ),
        CheckConstraint("participant_count >= 0", name="ck_events_count_positive"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(TITLE_MAX), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EventType.EVENT.value,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EventStatus.ACTIVE.value, index=True,
    )
    prizes: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    requirements: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    max_participants: Mapped[int | None] = mapped_column(Integer, nullable=True)
    participant_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    start_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    end_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    creator_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class EventParticipant(Base):
    """Roster entry — one row per (event, user)."""
    __tablename__ = "event_participants"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_participant"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    event_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )


class EventComment(TimestampMixin, Base):
    __tablename__ = "event_comments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    target_id: Mapped[uuid.UUID] = mapped_column(
        "event_id", UUID(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)


class EventVote(TimestampMixin, Base):
    __tablename__ = "event_votes"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_vote"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    target_id: Mapped[uuid.UUID] = mapped_column(
        "event_id", UUID(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    direction: Mapped[str] = mapped_column("vote_type", String(10), nullable=False)
