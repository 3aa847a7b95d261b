"""Report workflow — self-report guard, reference checks, forward-only review."""

from uuid import uuid4

import pytest

from bloxmarket.core.domain_types import ReportStatus
from bloxmarket.core.errors import (
    InvalidTransitionError, NotFoundError, SelfReportError, ValidationError,
)


async def test_create_pending(repos, alice, bob):
    report = await repos.reports.create(bob.id, alice.id, "Did not deliver")
    assert report.status is ReportStatus.PENDING
    assert report.reported_user_id == bob.id
    assert report.reporting_user_id == alice.id


async def test_self_report(repos, alice):
    with pytest.raises(SelfReportError):
        await repos.reports.create(alice.id, alice.id, "me")


async def test_unknown_reported_user(repos, alice):
    with pytest.raises(NotFoundError) as exc:
        await repos.reports.create(uuid4(), alice.id, "ghost")
    assert exc.value.resource_type == "Reported user"


async def test_unknown_reporting_user(repos, bob):
    with pytest.raises(NotFoundError) as exc:
        await repos.reports.create(bob.id, uuid4(), "ghost")
    assert exc.value.resource_type == "Reporting user"


async def test_blank_reason(repos, alice, bob):
    with pytest.raises(ValidationError) as exc:
        await repos.reports.create(bob.id, alice.id, " ")
    assert exc.value.field == "reason"


async def test_advance_through_sequence(repos, alice, bob):
    report = await repos.reports.create(bob.id, alice.id, "Scam")
    reviewed = await repos.reports.advance(report.id)
    resolved = await repos.reports.advance(report.id)
    assert reviewed.status is ReportStatus.REVIEWED
    assert resolved.status is ReportStatus.RESOLVED

    with pytest.raises(InvalidTransitionError):
        await repos.reports.advance(report.id)
    assert (await repos.reports.get(report.id)).status is ReportStatus.RESOLVED


async def test_advance_unknown_report(repos):
    with pytest.raises(NotFoundError):
        await repos.reports.advance(uuid4())


async def test_list_against(repos, alice, bob, carol):
    first = await repos.reports.create(bob.id, alice.id, "one")
    await repos.reports.create(alice.id, carol.id, "other")
    against_bob = await repos.reports.list_against(bob.id)
    assert [r.id for r in against_bob] == [first.id]
