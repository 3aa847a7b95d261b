"""Feedback Board — per-user votes and comments attached to a trade or an event.

Invariants:
    - At most one vote row per (target, user), enforced by the unique index
    - Re-casting the same direction withdraws the vote (core/enforce_votes.plan_vote)
    - Comments and votes require an existing target and an existing user
    - Comments list newest first

Design Decisions:
    - One class parameterized by (target, comment, vote) models: trades and
      events share the exact rules, only the tables differ
    - Vote writes are single statements; a lost race on the first insert hits
      the unique index and the whole read-plan-write is retried
"""

import logging
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError

from bloxmarket.core.clock import Clock, utc_now
from bloxmarket.core.domain_types import VoteDirection
from bloxmarket.core.enforce_votes import parse_direction, plan_vote
from bloxmarket.core.errors import ConcurrencyError, ErrorContext
from bloxmarket.core.repository_protocols import SessionProvider
from bloxmarket.models.user import User
from bloxmarket.schemas.feedback import (
    FeedbackCommentCreate, FeedbackCommentRecord, VoteTally,
)
from bloxmarket.schemas.parse import parse_input
from bloxmarket.services.atomic_update import DEFAULT_MAX_ATTEMPTS
from bloxmarket.services.lookups import require_exists

logger = logging.getLogger(__name__)


class FeedbackBoard:
    """Repository for the comment and vote rows of one target type."""

    def __init__(
        self,
        sessions: SessionProvider,
        target_model: type,
        comment_model: type,
        vote_model: type,
        clock: Clock = utc_now,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self._sessions = sessions
        self._target = target_model
        self._comment = comment_model
        self._vote = vote_model
        self._clock = clock
        self._max_attempts = max_attempts

    async def add_comment(
        self, target_id: UUID, author_id: UUID, content: str,
    ) -> FeedbackCommentRecord:
        data = parse_input(FeedbackCommentCreate, {
            "target_id": target_id, "author_id": author_id, "content": content,
        })
        now = self._clock()
        async with self._sessions.session() as db:
            await require_exists(db, self._target, data.target_id)
            await require_exists(db, User, data.author_id, "Author")
            comment = self._comment(
                **data.model_dump(), created_at=now, updated_at=now,
            )
            db.add(comment)
            await db.commit()
            await db.refresh(comment)
            return FeedbackCommentRecord.model_validate(comment)

    async def list_comments(self, target_id: UUID) -> list[FeedbackCommentRecord]:
        async with self._sessions.session() as db:
            await require_exists(db, self._target, target_id)
            result = await db.execute(
                select(self._comment)
                .where(self._comment.target_id == target_id)
                .order_by(self._comment.created_at.desc(), self._comment.id),
            )
            return [FeedbackCommentRecord.model_validate(c) for c in result.scalars()]

    async def vote(
        self, target_id: UUID, user_id: UUID, direction: VoteDirection | str,
    ) -> VoteTally:
        """Cast, switch or withdraw the user's vote; returns the new tally."""
        requested = parse_direction(direction)
        entity = self._target.__name__
        for attempt in range(1, self._max_attempts + 1):
            async with self._sessions.session() as db:
                await require_exists(db, self._target, target_id)
                await require_exists(db, User, user_id)
                existing = await self._user_vote(db, target_id, user_id)
                outcome = plan_vote(existing, requested)
                await self._apply_vote(db, target_id, user_id, existing, outcome)
                try:
                    await db.commit()
                except IntegrityError:
                    await db.rollback()
                    logger.warning(
                        f"{entity} {target_id} vote by {user_id} raced, retrying",
                        extra={
                            "entity": entity, "entity_id": target_id,
                            "user_id": user_id, "attempt": attempt,
                        },
                    )
                    continue
                return await self._tally(db, target_id, user_id)

        raise ConcurrencyError(
            f"{entity} '{target_id}' vote kept conflicting after "
            f"{self._max_attempts} attempts",
            ErrorContext(entity=entity, entity_id=str(target_id)),
        )

    async def votes(self, target_id: UUID, user_id: UUID | None = None) -> VoteTally:
        """Current tally; user_vote is filled in when user_id is given."""
        async with self._sessions.session() as db:
            await require_exists(db, self._target, target_id)
            return await self._tally(db, target_id, user_id)

    # ─── Helpers ─────────────────────────────────────────────────

    async def _user_vote(
        self, db, target_id: UUID, user_id: UUID,
    ) -> VoteDirection | None:
        result = await db.execute(
            select(self._vote.direction).where(
                self._vote.target_id == target_id, self._vote.user_id == user_id,
            ),
        )
        stored = result.scalar_one_or_none()
        return VoteDirection(stored) if stored else None

    async def _apply_vote(
        self,
        db,
        target_id: UUID,
        user_id: UUID,
        existing: VoteDirection | None,
        outcome: VoteDirection | None,
    ) -> None:
        vote = self._vote
        mine = (vote.target_id == target_id, vote.user_id == user_id)
        if existing is None:
            now = self._clock()
            db.add(vote(
                target_id=target_id, user_id=user_id, direction=outcome.value,
                created_at=now, updated_at=now,
            ))
        elif outcome is None:
            await db.execute(delete(vote).where(*mine))
        else:
            await db.execute(
                update(vote)
                .where(*mine)
                .values(direction=outcome.value, updated_at=self._clock())
                .execution_options(synchronize_session=False),
            )

    async def _tally(self, db, target_id: UUID, user_id: UUID | None) -> VoteTally:
        result = await db.execute(
            select(self._vote.direction, func.count())
            .where(self._vote.target_id == target_id)
            .group_by(self._vote.direction),
        )
        counts = dict(result.all())
        return VoteTally(
            upvotes=counts.get(VoteDirection.UP.value, 0),
            downvotes=counts.get(VoteDirection.DOWN.value, 0),
            user_vote=(
                await self._user_vote(db, target_id, user_id)
                if user_id is not None else None
            ),
        )
