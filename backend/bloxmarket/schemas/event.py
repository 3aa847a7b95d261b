"""Event Schemas — event creation/update inputs and the event record.

Invariants:
    - title 1-255 chars; max_participants >= 0 when set
    - The start/end ordering check lives in core (check_event_window) so updates
      can validate against stored dates too
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from bloxmarket.core.domain_types import TITLE_MAX, EventStatus, EventType
from bloxmarket.schemas.parse import non_nullable


class EventCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: str = Field(min_length=1, max_length=TITLE_MAX)
    type: EventType = EventType.EVENT
    creator_id: UUID
    description: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    max_participants: int | None = Field(None, ge=0)
    prizes: list[str] = []
    requirements: list[str] = []


class EventUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: str | None = Field(None, min_length=1, max_length=TITLE_MAX)
    type: EventType | None = None
    description: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    max_participants: int | None = Field(None, ge=0)
    prizes: list[str] | None = None
    requirements: list[str] | None = None

    reject_null = non_nullable("title", "type", "prizes", "requirements")


class EventRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str | None
    type: EventType
    status: EventStatus
    prizes: list[str]
    requirements: list[str]
    max_participants: int | None
    participant_count: int
    participants: list[UUID] = []
    start_date: datetime | None
    end_date: datetime | None
    creator_id: UUID
    created_at: datetime
    updated_at: datetime
