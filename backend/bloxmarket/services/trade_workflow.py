"""Trade Workflow — trade listings, status machine, images, ratings and deletion.

Invariants:
    - New trades start OPEN
    - transition() only writes edges allowed by core/enforce_transitions
    - Status writes are compare-and-swap on the trade's version
    - attach_image stores a URL reference only; uploaded_at is server-assigned
    - Ratings: completed trades only, never by the owner, one per rater
    - delete removes every child row in the same transaction as the trade
"""

import logging
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from bloxmarket.core.clock import Clock, utc_now
from bloxmarket.core.domain_types import TradeStatus
from bloxmarket.core.enforce_transitions import check_trade_transition
from bloxmarket.core.errors import ValidationError
from bloxmarket.core.repository_protocols import SessionProvider
from bloxmarket.models.trade import (
    Trade, TradeComment, TradeImage, TradeRating, TradeVote,
)
from bloxmarket.models.user import User
from bloxmarket.schemas.parse import parse_input
from bloxmarket.schemas.trade import (
    TradeCreate, TradeDetailsUpdate, TradeImageRecord, TradeRatingCreate,
    TradeRatingRecord, TradeRecord,
)
from bloxmarket.services.atomic_update import DEFAULT_MAX_ATTEMPTS, compare_and_swap
from bloxmarket.services.lookups import require_exists, require_row

logger = logging.getLogger(__name__)


class TradeWorkflow:
    """Repository for Trade rows and their images."""

    def __init__(
        self,
        sessions: SessionProvider,
        clock: Clock = utc_now,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self._sessions = sessions
        self._clock = clock
        self._max_attempts = max_attempts

    async def create(
        self,
        owner_id: UUID,
        item_offered: str,
        item_requested: str | None = None,
        description: str | None = None,
    ) -> TradeRecord:
        data = parse_input(TradeCreate, {
            "owner_id": owner_id, "item_offered": item_offered,
            "item_requested": item_requested, "description": description,
        })
        async with self._sessions.session() as db:
            await require_exists(db, User, data.owner_id, "Owner")
            trade = Trade(**data.model_dump(), status=TradeStatus.OPEN.value)
            db.add(trade)
            await db.commit()
            await db.refresh(trade)
            return _record(trade, [])

    async def get(self, trade_id: UUID) -> TradeRecord:
        async with self._sessions.session() as db:
            trade = await require_row(db, Trade, trade_id)
            return _record(trade, await _images(db, trade_id))

    async def list_by_owner(self, owner_id: UUID) -> list[TradeRecord]:
        async with self._sessions.session() as db:
            result = await db.execute(
                select(Trade)
                .where(Trade.owner_id == owner_id)
                .order_by(Trade.created_at.desc()),
            )
            return [
                _record(trade, await _images(db, trade.id))
                for trade in result.scalars().all()
            ]

    async def update_details(self, trade_id: UUID, **fields: object) -> TradeRecord:
        data = parse_input(TradeDetailsUpdate, fields)
        changes = data.model_dump(exclude_unset=True)

        async with self._sessions.session() as db:
            if not changes:
                trade = await require_row(db, Trade, trade_id)
            else:
                trade, _ = await compare_and_swap(
                    db, Trade, trade_id, lambda _: dict(changes),
                    max_attempts=self._max_attempts,
                )
                await db.commit()
            return _record(trade, await _images(db, trade_id))

    async def transition(
        self, trade_id: UUID, new_status: TradeStatus | str,
    ) -> TradeRecord:
        """Move along open -> in_progress -> completed, or cancel before completion."""
        try:
            target = TradeStatus(new_status)
        except ValueError:
            raise ValidationError(f"unknown trade status '{new_status}'", "status")

        def plan(trade: Trade) -> dict:
            return {"status": check_trade_transition(trade.status, target).value}

        async with self._sessions.session() as db:
            trade, _ = await compare_and_swap(
                db, Trade, trade_id, plan, max_attempts=self._max_attempts,
            )
            await db.commit()
            logger.info(
                f"Trade {trade_id} moved to {target.value}",
                extra={"entity": "Trade", "entity_id": trade_id, "status": target.value},
            )
            return _record(trade, await _images(db, trade_id))

    async def attach_image(self, trade_id: UUID, url: str) -> TradeRecord:
        url = (url or "").strip()
        if not url:
            raise ValidationError("image url is required", "url")
        async with self._sessions.session() as db:
            trade = await require_row(db, Trade, trade_id)
            db.add(TradeImage(trade_id=trade_id, url=url, uploaded_at=self._clock()))
            await db.commit()
            return _record(trade, await _images(db, trade_id))

    async def rate(
        self,
        trade_id: UUID,
        rater_id: UUID,
        rating: int,
        comment: str | None = None,
    ) -> TradeRatingRecord:
        """Score the owner of a completed trade, once per rater."""
        data = parse_input(TradeRatingCreate, {
            "trade_id": trade_id, "rater_id": rater_id,
            "rating": rating, "comment": comment,
        })
        now = self._clock()
        async with self._sessions.session() as db:
            trade = await require_row(db, Trade, data.trade_id)
            await require_exists(db, User, data.rater_id, "Rater")
            if trade.status != TradeStatus.COMPLETED.value:
                raise ValidationError(
                    f"only completed trades can be rated (status '{trade.status}')",
                    "status",
                )
            if data.rater_id == trade.owner_id:
                raise ValidationError("owners cannot rate their own trade", "rater_id")

            row = TradeRating(
                **data.model_dump(), rated_id=trade.owner_id,
                created_at=now, updated_at=now,
            )
            db.add(row)
            try:
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                raise ValidationError(
                    "this user already rated the trade", "rater_id",
                ) from exc
            await db.refresh(row)
            logger.info(
                f"Trade {trade_id} rated {data.rating} by {rater_id}",
                extra={"entity": "Trade", "entity_id": trade_id, "user_id": rater_id},
            )
            return TradeRatingRecord.model_validate(row)

    async def list_ratings(self, trade_id: UUID) -> list[TradeRatingRecord]:
        async with self._sessions.session() as db:
            await require_exists(db, Trade, trade_id)
            result = await db.execute(
                select(TradeRating)
                .where(TradeRating.trade_id == trade_id)
                .order_by(TradeRating.created_at, TradeRating.id),
            )
            return [TradeRatingRecord.model_validate(r) for r in result.scalars()]

    async def delete(self, trade_id: UUID) -> None:
        """Remove a trade together with its images, comments, ratings and votes."""
        async with self._sessions.session() as db:
            await require_exists(db, Trade, trade_id)
            for child in (TradeImage, TradeRating):
                await db.execute(delete(child).where(child.trade_id == trade_id))
            for child in (TradeComment, TradeVote):
                await db.execute(delete(child).where(child.target_id == trade_id))
            await db.execute(delete(Trade).where(Trade.id == trade_id))
            await db.commit()
            logger.info(
                f"Trade {trade_id} deleted",
                extra={"entity": "Trade", "entity_id": trade_id},
            )


async def _images(db, trade_id: UUID) -> list[TradeImageRecord]:
    result = await db.execute(
        select(TradeImage)
        .where(TradeImage.trade_id == trade_id)
        .order_by(TradeImage.uploaded_at, TradeImage.id),
    )
    return [TradeImageRecord.model_validate(image) for image in result.scalars()]


def _record(trade: Trade, images: list[TradeImageRecord]) -> TradeRecord:
    record = TradeRecord.model_validate(trade)
    return record.model_copy(update={"images": images})
