"""Event Roster — event lifecycle, write-time status derivation, join/leave, deletion.

Invariants:
    - status is derived on create and on any update that touches start_date/end_date
    - participant_count and the event_participants rows change in ONE transaction,
      guarded by compare-and-swap on the event's version
    - The unique (event_id, user_id) index backs AlreadyJoinedError under races
    - leave() by a non-participant raises NotFoundError
    - delete removes roster, comment and vote rows with the event, atomically

Design Decisions:
    - Stored status is a snapshot (see DESIGN.md); join() checks the end date
      against the live clock so a stale snapshot never admits late joins
    - The roster plan re-reads participants inside the CAS loop so a retried join
      re-checks capacity against the winner's write
"""

import logging
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from bloxmarket.core.clock import Clock, utc_now
from bloxmarket.core.derive_event_status import (
    check_event_window, derive_event_status, touches_event_window,
)
from bloxmarket.core.domain_types import EventType
from bloxmarket.core.enforce_roster import plan_join, plan_leave
from bloxmarket.core.errors import AlreadyJoinedError, ValidationError
from bloxmarket.core.repository_protocols import SessionProvider
from bloxmarket.models.event import (
    Event, EventComment, EventParticipant, EventVote,
)
from bloxmarket.models.user import User
from bloxmarket.schemas.event import EventCreate, EventRecord, EventUpdate
from bloxmarket.schemas.parse import parse_input
from bloxmarket.services.atomic_update import DEFAULT_MAX_ATTEMPTS, compare_and_swap
from bloxmarket.services.lookups import require_exists, require_row

logger = logging.getLogger(__name__)


class EventRoster:
    """Repository for Event rows and their participant rosters."""

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
        title: str,
        type: EventType | str,
        creator_id: UUID,
        start_date=None,
        end_date=None,
        max_participants: int | None = None,
        **fields: object,
    ) -> EventRecord:
        data = parse_input(EventCreate, {
            "title": title, "type": type, "creator_id": creator_id,
            "start_date": start_date, "end_date": end_date,
            "max_participants": max_participants, **fields,
        })
        check_event_window(data.start_date, data.end_date)
        status = derive_event_status(self._clock(), data.start_date, data.end_date)

        async with self._sessions.session() as db:
            await require_exists(db, User, data.creator_id, "Creator")
            event = Event(
                **data.model_dump(exclude={"type"}),
                type=data.type.value,
                status=status.value,
                participant_count=0,
            )
            db.add(event)
            await db.commit()
            await db.refresh(event)
            logger.info(
                f"Event '{event.title}' created as {event.status}",
                extra={"entity": "Event", "entity_id": event.id, "status": event.status},
            )
            return _record(event, [])

    async def get(self, event_id: UUID) -> EventRecord:
        async with self._sessions.session() as db:
            event = await require_row(db, Event, event_id)
            return _record(event, await _participants(db, event_id))

    async def update(self, event_id: UUID, **fields: object) -> EventRecord:
        """Rewrite descriptive fields; re-derive status iff a date is touched."""
        data = parse_input(EventUpdate, fields)
        changes = data.model_dump(exclude_unset=True)
        if "type" in changes:
            changes["type"] = changes["type"].value
        now = self._clock()

        def plan(event: Event) -> dict:
            planned = dict(changes)
            start = planned.get("start_date", event.start_date)
            end = planned.get("end_date", event.end_date)
            check_event_window(start, end)
            cap = planned.get("max_participants", event.max_participants)
            if cap is not None and cap < event.participant_count:
                raise ValidationError(
                    f"max_participants cannot drop below the current "
                    f"{event.participant_count} participants",
                    "max_participants",
                )
            if touches_event_window(planned):
                planned["status"] = derive_event_status(now, start, end).value
            return planned

        async with self._sessions.session() as db:
            if not changes:
                event = await require_row(db, Event, event_id)
            else:
                event, _ = await compare_and_swap(
                    db, Event, event_id, plan, max_attempts=self._max_attempts,
                )
                await db.commit()
            return _record(event, await _participants(db, event_id))

    async def join(self, event_id: UUID, user_id: UUID) -> EventRecord:
        now = self._clock()

        async with self._sessions.session() as db:
            await require_exists(db, User, user_id)

            async def plan(event: Event) -> dict:
                roster = set(await _participants(db, event_id))
                count = plan_join(
                    roster, event.max_participants, user_id, now, event.end_date,
                )
                return {"participant_count": count}

            event, _ = await compare_and_swap(
                db, Event, event_id, plan, max_attempts=self._max_attempts,
            )
            db.add(EventParticipant(event_id=event_id, user_id=user_id, joined_at=now))
            try:
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                raise AlreadyJoinedError() from exc
            logger.info(
                f"User {user_id} joined event {event_id}",
                extra={"entity": "Event", "entity_id": event_id, "user_id": user_id},
            )
            return _record(event, await _participants(db, event_id))

    async def leave(self, event_id: UUID, user_id: UUID) -> EventRecord:
        async with self._sessions.session() as db:

            async def plan(event: Event) -> dict:
                roster = set(await _participants(db, event_id))
                return {"participant_count": plan_leave(roster, user_id)}

            event, _ = await compare_and_swap(
                db, Event, event_id, plan, max_attempts=self._max_attempts,
            )
            await db.execute(
                delete(EventParticipant).where(
                    EventParticipant.event_id == event_id,
                    EventParticipant.user_id == user_id,
                ),
            )
            await db.commit()
            logger.info(
                f"User {user_id} left event {event_id}",
                extra={"entity": "Event", "entity_id": event_id, "user_id": user_id},
            )
            return _record(event, await _participants(db, event_id))

    async def delete(self, event_id: UUID) -> None:
        """Remove an event with its roster, comments and votes."""
        async with self._sessions.session() as db:
            await require_exists(db, Event, event_id)
            await db.execute(
                delete(EventParticipant).where(EventParticipant.event_id == event_id),
            )
            for child in (EventComment, EventVote):
                await db.execute(delete(child).where(child.target_id == event_id))
            await db.execute(delete(Event).where(Event.id == event_id))
            await db.commit()
            logger.info(
                f"Event {event_id} deleted",
                extra={"entity": "Event", "entity_id": event_id},
            )


async def _participants(db, event_id: UUID) -> list[UUID]:
    result = await db.execute(
        select(EventParticipant.user_id)
        .where(EventParticipant.event_id == event_id)
        .order_by(EventParticipant.joined_at, EventParticipant.id),
    )
    return list(result.scalars())


def _record(event: Event, participants: list[UUID]) -> EventRecord:
    record = EventRecord.model_validate(event)
    return record.model_copy(update={"participants": participants})
