"""Event roster — status snapshots, capacity, and join/leave bookkeeping.

Invariants:
    - participant_count == len(participants) after every operation
    - status is derived on create and on updates touching start/end dates only
    - join checks the live end date, not the stored snapshot
    - delete leaves no roster, comment or vote rows behind
"""

from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine

import bloxmarket.services.event_roster as event_roster
from bloxmarket.core.domain_types import EventStatus, EventType
from bloxmarket.core.errors import (
    AlreadyJoinedError, CapacityError, EventEndedError, NotFoundError,
    ValidationError,
)
from bloxmarket.db.base import Base
from bloxmarket.infrastructure.database import DatabaseSessionManager
from bloxmarket.models.event import EventComment, EventParticipant, EventVote
from bloxmarket.services.repositories import build_repositories


async def _event(repos, creator, clock, **kw):
    defaults = {
        "title": "Summer Giveaway",
        "type": EventType.GIVEAWAY,
        "creator_id": creator.id,
    }
    defaults.update(kw)
    return await repos.events.create(**defaults)


async def test_create_without_dates_is_active(repos, alice, clock):
    event = await _event(repos, alice, clock, prizes=["Golden Pet"])
    assert event.status is EventStatus.ACTIVE
    assert event.participant_count == 0
    assert event.participants == []
    assert event.prizes == ["Golden Pet"]


async def test_create_future_event_is_upcoming(repos, alice, clock):
    event = await _event(
        repos, alice, clock,
        start_date=clock.now + timedelta(days=1),
        end_date=clock.now + timedelta(days=2),
    )
    assert event.status is EventStatus.UPCOMING


async def test_create_past_event_is_ended(repos, alice, clock):
    event = await _event(
        repos, alice, clock,
        start_date=clock.now - timedelta(days=2),
        end_date=clock.now - timedelta(days=1),
    )
    assert event.status is EventStatus.ENDED


async def test_create_rejects_inverted_window(repos, alice, clock):
    with pytest.raises(ValidationError) as exc:
        await _event(
            repos, alice, clock,
            start_date=clock.now + timedelta(days=2),
            end_date=clock.now + timedelta(days=1),
        )
    assert exc.value.field == "end_date"


async def test_create_unknown_creator(repos, clock):
    with pytest.raises(NotFoundError) as exc:
        await repos.events.create("Ghost", "event", uuid4())
    assert exc.value.resource_type == "Creator"


async def test_status_snapshot_rederived_only_on_date_update(repos, alice, clock):
    start = clock.now + timedelta(hours=1)
    end = clock.now + timedelta(hours=3)
    event = await _event(repos, alice, clock, start_date=start, end_date=end)
    assert event.status is EventStatus.UPCOMING

    clock.advance(hours=2)
    retitled = await repos.events.update(event.id, title="Summer Giveaway II")
    assert retitled.title == "Summer Giveaway II"
    assert retitled.status is EventStatus.UPCOMING

    touched = await repos.events.update(event.id, end_date=end)
    assert touched.status is EventStatus.ACTIVE

    clock.advance(hours=2)
    extended = await repos.events.update(event.id, end_date=end + timedelta(minutes=30))
    assert extended.status is EventStatus.ENDED


async def test_update_checks_window_against_stored_dates(repos, alice, clock):
    event = await _event(
        repos, alice, clock,
        start_date=clock.now + timedelta(days=1),
        end_date=clock.now + timedelta(days=2),
    )
    with pytest.raises(ValidationError):
        await repos.events.update(event.id, end_date=clock.now)


async def test_update_unknown_event(repos):
    with pytest.raises(NotFoundError):
        await repos.events.update(uuid4(), title="x")


async def test_join_and_leave(repos, alice, bob, carol, clock):
    event = await _event(repos, alice, clock)

    await repos.events.join(event.id, bob.id)
    clock.advance(seconds=1)
    joined = await repos.events.join(event.id, carol.id)
    assert joined.participants == [bob.id, carol.id]
    assert joined.participant_count == 2

    left = await repos.events.leave(event.id, bob.id)
    assert left.participants == [carol.id]
    assert left.participant_count == 1


async def test_join_twice(repos, alice, bob, clock):
    event = await _event(repos, alice, clock)
    await repos.events.join(event.id, bob.id)
    with pytest.raises(AlreadyJoinedError):
        await repos.events.join(event.id, bob.id)
    assert (await repos.events.get(event.id)).participant_count == 1


async def test_join_full_event(repos, alice, bob, carol, clock):
    event = await _event(repos, alice, clock, max_participants=1)
    await repos.events.join(event.id, bob.id)
    with pytest.raises(CapacityError):
        await repos.events.join(event.id, carol.id)

    stored = await repos.events.get(event.id)
    assert stored.participants == [bob.id]
    assert stored.participant_count == 1


async def test_leave_frees_a_seat(repos, alice, bob, carol, clock):
    event = await _event(repos, alice, clock, max_participants=1)
    await repos.events.join(event.id, bob.id)
    await repos.events.leave(event.id, bob.id)
    joined = await repos.events.join(event.id, carol.id)
    assert joined.participants == [carol.id]


async def test_join_after_end_uses_live_clock(repos, alice, bob, clock):
    event = await _event(repos, alice, clock, end_date=clock.now + timedelta(hours=1))
    assert event.status is EventStatus.ACTIVE

    clock.advance(hours=2)
    with pytest.raises(EventEndedError):
        await repos.events.join(event.id, bob.id)
    assert (await repos.events.get(event.id)).participant_count == 0


async def test_leave_by_non_participant(repos, alice, bob, clock):
    event = await _event(repos, alice, clock)
    with pytest.raises(NotFoundError) as exc:
        await repos.events.leave(event.id, bob.id)
    assert exc.value.resource_type == "Participant"


async def test_join_unknown_event(repos, bob):
    with pytest.raises(NotFoundError) as exc:
        await repos.events.join(uuid4(), bob.id)
    assert exc.value.resource_type == "Event"


async def test_join_unknown_user(repos, alice, clock):
    event = await _event(repos, alice, clock)
    with pytest.raises(NotFoundError) as exc:
        await repos.events.join(event.id, uuid4())
    assert exc.value.resource_type == "User"


async def test_capacity_cannot_drop_below_count(repos, alice, bob, carol, clock):
    event = await _event(repos, alice, clock, max_participants=5)
    await repos.events.join(event.id, bob.id)
    await repos.events.join(event.id, carol.id)
    with pytest.raises(ValidationError) as exc:
        await repos.events.update(event.id, max_participants=1)
    assert exc.value.field == "max_participants"


@pytest.mark.parametrize("field", ["title", "type", "prizes", "requirements"])
async def test_update_rejects_null_for_required_field(repos, alice, clock, field):
    event = await _event(repos, alice, clock, prizes=["Huge Cat"])
    with pytest.raises(ValidationError) as exc:
        await repos.events.update(event.id, **{field: None})
    assert exc.value.field == field

    stored = await repos.events.get(event.id)
    assert stored.title == "Summer Giveaway"
    assert stored.prizes == ["Huge Cat"]


@pytest.fixture
async def file_repos(tmp_path, clock):
    """Repositories over a file database, so each session gets its own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'roster.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield build_repositories(
        DatabaseSessionManager.from_engine(engine), clock, max_attempts=3,
    )
    await engine.dispose()


async def test_join_retry_sees_seat_taken_by_competing_writer(
    file_repos, clock, monkeypatch,
):
    repos = file_repos
    alice = await repos.users.create("alice", "alice@example.com", "h")
    bob = await repos.users.create("bob", "bob@example.com", "h")
    carol = await repos.users.create("carol", "carol@example.com", "h")
    event = await _event(repos, alice, clock, max_participants=1)

    read_participants = event_roster._participants
    competed = []

    async def participants_then_compete(db, event_id):
        roster = await read_participants(db, event_id)
        if not competed:
            competed.append(True)
            await repos.events.join(event_id, carol.id)
        return roster

    monkeypatch.setattr(event_roster, "_participants", participants_then_compete)

    with pytest.raises(CapacityError):
        await repos.events.join(event.id, bob.id)
    assert len(competed) == 1

    monkeypatch.setattr(event_roster, "_participants", read_participants)
    stored = await repos.events.get(event.id)
    assert stored.participants == [carol.id]
    assert stored.participant_count == 1


async def test_delete_removes_roster_and_feedback(repos, sessions, alice, bob, clock):
    event = await _event(repos, alice, clock)
    await repos.events.join(event.id, bob.id)
    await repos.event_feedback.add_comment(event.id, bob.id, "Count me in")
    await repos.event_feedback.vote(event.id, bob.id, "up")

    await repos.events.delete(event.id)

    with pytest.raises(NotFoundError):
        await repos.events.get(event.id)
    async with sessions.session() as db:
        for model, column in [
            (EventParticipant, EventParticipant.event_id),
            (EventComment, EventComment.target_id),
            (EventVote, EventVote.target_id),
        ]:
            remaining = await db.scalar(
                select(func.count()).select_from(model).where(column == event.id),
            )
            assert remaining == 0, model.__name__


async def test_delete_unknown_event(repos):
    with pytest.raises(NotFoundError) as exc:
        await repos.events.delete(uuid4())
    assert exc.value.resource_type == "Event"
