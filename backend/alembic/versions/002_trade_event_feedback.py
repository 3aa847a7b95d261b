"""Trade and event feedback — comments, ratings and per-user votes.

Revision ID: 002_feedback
Revises: 001_initial
Create Date: 2026-10-18

All tables cascade with their trade/event. One vote per (target, user) and one
rating per (trade, rater) are unique constraints.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "002_feedback"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def _comments(table: str, parent: str, parent_column: str) -> None:
    op.create_table(
        table,
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(parent_column, UUID(as_uuid=True), sa.ForeignKey(f"{parent}.id", ondelete="CASCADE"), nullable=False),
        sa.Column("author_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        *_timestamps(),
    )
    op.create_index(f"ix_{table}_{parent_column}", table, [parent_column])
    op.create_index(f"ix_{table}_author_id", table, ["author_id"])


def _votes(table: str, parent: str, parent_column: str, unique_name: str) -> None:
    op.create_table(
        table,
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(parent_column, UUID(as_uuid=True), sa.ForeignKey(f"{parent}.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("vote_type", sa.String(10), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(parent_column, "user_id", name=unique_name),
    )
    op.create_index(f"ix_{table}_{parent_column}", table, [parent_column])
    op.create_index(f"ix_{table}_user_id", table, ["user_id"])


def upgrade() -> None:
    _comments("trade_comments", "trades", "trade_id")
    _votes("trade_votes", "trades", "trade_id", "uq_trade_vote")

    op.create_table(
        "trade_ratings",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("trade_id", UUID(as_uuid=True), sa.ForeignKey("trades.id", ondelete="CASCADE"), nullable=False),
        sa.Column("rater_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("rated_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("rating", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("trade_id", "rater_id", name="uq_trade_rating"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_trade_ratings_range"),
    )
    op.create_index("ix_trade_ratings_trade_id", "trade_ratings", ["trade_id"])
    op.create_index("ix_trade_ratings_rater_id", "trade_ratings", ["rater_id"])
    op.create_index("ix_trade_ratings_rated_id", "trade_ratings", ["rated_id"])

    _comments("event_comments", "events", "event_id")
    _votes("event_votes", "events", "event_id", "uq_event_vote")


def downgrade() -> None:
    op.drop_table("event_votes")
    op.drop_table("event_comments")
    op.drop_table("trade_ratings")
    op.drop_table("trade_votes")
    op.drop_table("trade_comments")
