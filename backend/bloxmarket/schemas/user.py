"""User Schemas — identity registry inputs and the public user record.

Invariants:
    - username 1-50 chars, email 3-100 chars, both stripped; email lowercased
    - UserUpdate only carries profile fields plus role/ban_reason
    - UserRecord has no password_hash attribute at all

Design Decisions:
    - Email uniqueness is case-insensitive because the stored value is lowercased
      here, before the unique index sees it
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bloxmarket.core.domain_types import (
    BIO_MAX, EMAIL_MAX, HANDLE_MAX, USERNAME_MAX, UserRole,
)
from bloxmarket.schemas.parse import non_nullable


class _ProfileFields(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    roblox_username: str | None = Field(None, max_length=HANDLE_MAX)
    avatar_url: str | None = None
    bio: str | None = Field(None, max_length=BIO_MAX)
    discord_username: str | None = Field(None, max_length=HANDLE_MAX)
    timezone: str | None = Field(None, max_length=HANDLE_MAX)


class UserCreate(_ProfileFields):
    """Account creation — password_hash comes pre-hashed from the auth service."""
    username: str = Field(min_length=1, max_length=USERNAME_MAX)
    email: str = Field(min_length=3, max_length=EMAIL_MAX, pattern=r"^[^@\s]+@[^@\s]+$")
    password_hash: str = Field(min_length=1)
    role: UserRole = UserRole.USER
    ban_reason: str | None = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class UserUpdate(_ProfileFields):
    """Partial update — only fields explicitly passed are written."""
    verification_requested: bool | None = None
    middleman_requested: bool | None = None
    role: UserRole | None = None
    ban_reason: str | None = Field(None, max_length=BIO_MAX)

    reject_null = non_nullable("verification_requested", "middleman_requested")


class UserRecord(BaseModel):
    """Public user view."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    email: str
    roblox_username: str | None
    avatar_url: str | None
    credibility_score: int
    role: UserRole
    bio: str | None
    discord_username: str | None
    timezone: str | None
    verification_requested: bool
    middleman_requested: bool
    ban_reason: str | None
    banned_at: datetime | None
    last_login: datetime | None
    created_at: datetime


class SessionTokenRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    token: str
    issued_at: datetime
