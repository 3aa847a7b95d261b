"""Feedback Schemas — comments and vote tallies attached to trades and events.

Invariants:
    - content is stripped and must be non-empty
    - VoteTally.user_vote is the asking user's vote, None when they have none
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from bloxmarket.core.domain_types import VoteDirection


class FeedbackCommentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    target_id: UUID
    author_id: UUID
    content: str = Field(min_length=1)


class FeedbackCommentRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    target_id: UUID
    author_id: UUID
    content: str
    created_at: datetime


class VoteTally(BaseModel):
    upvotes: int = 0
    downvotes: int = 0
    user_vote: VoteDirection | None = None
