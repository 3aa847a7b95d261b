"""Forum Schemas — posts, image metadata, comments.

Invariants:
    - ForumImage requires all five descriptive fields; a partial entry fails the
      whole PostCreate
    - Image metadata is supplied by the upload service; nothing here touches bytes
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from bloxmarket.core.domain_types import TITLE_MAX, ForumCategory


class ForumImage(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    filename: str = Field(min_length=1)
    original_name: str = Field(min_length=1)
    path: str = Field(min_length=1)
    size: int = Field(ge=0)
    mimetype: str = Field(min_length=1)


class PostCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    author_id: UUID
    category: ForumCategory = ForumCategory.GENERAL
    title: str = Field(min_length=1, max_length=TITLE_MAX)
    content: str = Field(min_length=1)
    images: list[ForumImage] = []


class PostRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    author_id: UUID
    category: ForumCategory
    title: str
    content: str
    images: list[ForumImage]
    upvotes: int
    downvotes: int
    created_at: datetime


class CommentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    post_id: UUID
    author_id: UUID
    content: str = Field(min_length=1)


class CommentRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    post_id: UUID
    author_id: UUID
    content: str
    created_at: datetime
