"""Trade Schemas — trade creation/edit inputs, ratings, and the trade record."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from bloxmarket.core.domain_types import TradeStatus
from bloxmarket.schemas.parse import non_nullable


class TradeCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    owner_id: UUID
    item_offered: str = Field(min_length=1)
    item_requested: str | None = None
    description: str | None = None


class TradeDetailsUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    item_offered: str | None = Field(None, min_length=1)
    item_requested: str | None = None
    description: str | None = None

    reject_null = non_nullable("item_offered")


class TradeImageRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    url: str
    uploaded_at: datetime


class TradeRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID
    item_offered: str
    item_requested: str | None
    description: str | None
    status: TradeStatus
    images: list[TradeImageRecord] = []
    created_at: datetime
    updated_at: datetime


class TradeRatingCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    trade_id: UUID
    rater_id: UUID
    rating: int = Field(ge=1, le=5)
    comment: str | None = None


class TradeRatingRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    trade_id: UUID
    rater_id: UUID
    rated_id: UUID
    rating: int
    comment: str | None
    created_at: datetime
