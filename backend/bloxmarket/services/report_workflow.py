"""Report Workflow — user reports and their forward-only review sequence.

Invariants:
    - A report never names the same user as reporter and reported
    - Both users must exist before the report is written
    - advance() moves exactly one step: pending -> reviewed -> resolved
"""

import logging
from uuid import UUID

from sqlalchemy import select

from bloxmarket.core.domain_types import ReportStatus
from bloxmarket.core.enforce_transitions import next_report_status
from bloxmarket.core.errors import SelfReportError
from bloxmarket.core.repository_protocols import SessionProvider
from bloxmarket.models.report import Report
from bloxmarket.models.user import User
from bloxmarket.schemas.parse import parse_input
from bloxmarket.schemas.report import ReportCreate, ReportRecord
from bloxmarket.services.atomic_update import DEFAULT_MAX_ATTEMPTS, compare_and_swap
from bloxmarket.services.lookups import require_exists, require_row

logger = logging.getLogger(__name__)


class ReportWorkflow:
    """Repository for moderation reports."""

    def __init__(
        self, sessions: SessionProvider, max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self._sessions = sessions
        self._max_attempts = max_attempts

    async def create(
        self, reported_user_id: UUID, reporting_user_id: UUID, reason: str,
    ) -> ReportRecord:
        data = parse_input(ReportCreate, {
            "reported_user_id": reported_user_id,
            "reporting_user_id": reporting_user_id,
            "reason": reason,
        })
        if data.reported_user_id == data.reporting_user_id:
            raise SelfReportError()

        async with self._sessions.session() as db:
            await require_exists(db, User, data.reported_user_id, "Reported user")
            await require_exists(db, User, data.reporting_user_id, "Reporting user")
            report = Report(**data.model_dump(), status=ReportStatus.PENDING.value)
            db.add(report)
            await db.commit()
            await db.refresh(report)
            logger.info(
                f"Report filed against user {report.reported_user_id}",
                extra={"entity": "Report", "entity_id": report.id},
            )
            return ReportRecord.model_validate(report)

    async def get(self, report_id: UUID) -> ReportRecord:
        async with self._sessions.session() as db:
            return ReportRecord.model_validate(
                await require_row(db, Report, report_id),
            )

    async def list_against(self, user_id: UUID) -> list[ReportRecord]:
        """Reports naming user_id as the reported user, newest first."""
        async with self._sessions.session() as db:
            result = await db.execute(
                select(Report)
                .where(Report.reported_user_id == user_id)
                .order_by(Report.created_at.desc()),
            )
            return [ReportRecord.model_validate(r) for r in result.scalars()]

    async def advance(self, report_id: UUID) -> ReportRecord:
        def plan(report: Report) -> dict:
            return {"status": next_report_status(report.status).value}

        async with self._sessions.session() as db:
            report, applied = await compare_and_swap(
                db, Report, report_id, plan, max_attempts=self._max_attempts,
            )
            await db.commit()
            logger.info(
                f"Report {report_id} advanced to {applied['status']}",
                extra={"entity": "Report", "entity_id": report_id, "status": applied["status"]},
            )
            return ReportRecord.model_validate(report)
