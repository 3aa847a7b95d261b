"""Report Schemas — moderation report input and record."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from bloxmarket.core.domain_types import ReportStatus


class ReportCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    reported_user_id: UUID
    reporting_user_id: UUID
    reason: str = Field(min_length=1)


class ReportRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    reported_user_id: UUID
    reporting_user_id: UUID
    reason: str
    status: ReportStatus
    created_at: datetime
    updated_at: datetime
