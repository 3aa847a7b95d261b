"""Forum Content — posts, vote counters, and comments.

Invariants:
    - New posts start with upvotes == downvotes == 0
    - vote() is a pure counter: +1 per call via a single UPDATE, no dedupe or undo
    - Comments require an existing post and an existing author
    - delete_post removes the comments in the same transaction as the post
"""

import logging
from uuid import UUID

from sqlalchemy import delete, select, update

from bloxmarket.core.domain_types import ForumCategory, VoteDirection
from bloxmarket.core.enforce_votes import parse_direction
from bloxmarket.core.errors import NotFoundError
from bloxmarket.core.repository_protocols import SessionProvider
from bloxmarket.models.forum import ForumComment, ForumPost
from bloxmarket.models.user import User
from bloxmarket.schemas.forum import (
    CommentCreate, CommentRecord, PostCreate, PostRecord,
)
from bloxmarket.schemas.parse import parse_input
from bloxmarket.services.atomic_update import load_current
from bloxmarket.services.lookups import require_exists, require_row

logger = logging.getLogger(__name__)


class ForumContent:
    """Repository for forum posts and comments."""

    def __init__(self, sessions: SessionProvider):
        self._sessions = sessions

    async def create_post(
        self,
        author_id: UUID,
        category: ForumCategory | str,
        title: str,
        content: str,
        images: list[dict] | None = None,
    ) -> PostRecord:
        data = parse_input(PostCreate, {
            "author_id": author_id, "category": category, "title": title,
            "content": content, "images": images or [],
        })
        async with self._sessions.session() as db:
            await require_exists(db, User, data.author_id, "Author")
            post = ForumPost(
                author_id=data.author_id,
                category=data.category.value,
                title=data.title,
                content=data.content,
                images=[image.model_dump() for image in data.images],
                upvotes=0,
                downvotes=0,
            )
            db.add(post)
            await db.commit()
            await db.refresh(post)
            return PostRecord.model_validate(post)

    async def get_post(self, post_id: UUID) -> PostRecord:
        async with self._sessions.session() as db:
            return PostRecord.model_validate(
                await require_row(db, ForumPost, post_id, "Post"),
            )

    async def vote(self, post_id: UUID, direction: VoteDirection | str) -> PostRecord:
        direction = parse_direction(direction)
        column = "upvotes" if direction is VoteDirection.UP else "downvotes"

        async with self._sessions.session() as db:
            result = await db.execute(
                update(ForumPost)
                .where(ForumPost.id == post_id)
                .values({column: getattr(ForumPost, column) + 1})
                .execution_options(synchronize_session=False),
            )
            if result.rowcount == 0:
                raise NotFoundError("Post", str(post_id))
            await db.commit()
            return PostRecord.model_validate(
                await load_current(db, ForumPost, post_id),
            )

    async def create_comment(
        self, post_id: UUID, author_id: UUID, content: str,
    ) -> CommentRecord:
        data = parse_input(CommentCreate, {
            "post_id": post_id, "author_id": author_id, "content": content,
        })
        async with self._sessions.session() as db:
            await require_exists(db, ForumPost, data.post_id, "Post")
            await require_exists(db, User, data.author_id, "Author")
            comment = ForumComment(**data.model_dump())
            db.add(comment)
            await db.commit()
            await db.refresh(comment)
            return CommentRecord.model_validate(comment)

    async def list_comments(self, post_id: UUID) -> list[CommentRecord]:
        async with self._sessions.session() as db:
            result = await db.execute(
                select(ForumComment)
                .where(ForumComment.post_id == post_id)
                .order_by(ForumComment.created_at, ForumComment.id),
            )
            return [CommentRecord.model_validate(c) for c in result.scalars()]

    async def delete_post(self, post_id: UUID) -> None:
        """Remove a post and its comments."""
        async with self._sessions.session() as db:
            await require_exists(db, ForumPost, post_id, "Post")
            await db.execute(delete(ForumComment).where(ForumComment.post_id == post_id))
            await db.execute(delete(ForumPost).where(ForumPost.id == post_id))
            await db.commit()
            logger.info(
                f"Post {post_id} deleted",
                extra={"entity": "Post", "entity_id": post_id},
            )
