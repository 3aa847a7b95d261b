"""Forum ORM — posts with vote counters and their comments.

Invariants:
    - upvotes/downvotes are non-negative and only ever incremented in-database
    - images is a JSON list of complete {filename, original_name, path, size, mimetype}
      entries (validated by schemas/forum.ForumImage before insert)

Design Decisions:
    - No version column: votes are single atomic increments with no invariant
      spanning other columns
"""

import uuid

from sqlalchemy import JSON, CheckConstraint, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from bloxmarket.core.domain_types import TITLE_MAX, ForumCategory
from bloxmarket.db.base import Base, TimestampMixin


class ForumPost(TimestampMixin, Base):
    __tablename__ = "forum_posts"
    __table_args__ = (
        CheckConstraint("upvotes >= 0 AND downvotes >= 0", name="ck_forum_posts_votes"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    category: Mapped[str] = mapped_column(
        String(30), nullable=False, default=ForumCategory.GENERAL.value,
    )
    title: Mapped[str] = mapped_column(String(TITLE_MAX), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    downvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ForumComment(TimestampMixin, Base):
    __tablename__ = "forum_comments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    post_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("forum_posts.id"), nullable=False, index=True,
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
