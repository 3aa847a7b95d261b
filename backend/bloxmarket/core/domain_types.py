"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, TradeId, EventId, PostId, ReportId wrap UUIDs
    - All valid states encoded as Enums — no raw string matching
    - Enum values are the exact strings persisted in status/role columns

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and compare equal to stored column values
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
TradeId = NewType("TradeId", UUID)
WishlistItemId = NewType("WishlistItemId", UUID)
EventId = NewType("EventId", UUID)
PostId = NewType("PostId", UUID)
CommentId = NewType("CommentId", UUID)
ReportId = NewType("ReportId", UUID)


# ─── Field Limits ────────────────────────────────────────────────

USERNAME_MAX = 50
EMAIL_MAX = 100
HANDLE_MAX = 50          # roblox_username, discord_username, timezone
BIO_MAX = 500
TITLE_MAX = 255


# ─── Enums ───────────────────────────────────────────────────────

class UserRole(str, Enum):
    """Account roles — BANNED carries ban_reason/banned_at."""
    USER = "user"
    VERIFIED = "verified"
    MIDDLEMAN = "middleman"
    ADMIN = "admin"
    MODERATOR = "moderator"
    BANNED = "banned"


class TradeStatus(str, Enum):
    """Trade workflow states. COMPLETED and CANCELLED are terminal."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EventType(str, Enum):
    GIVEAWAY = "giveaway"
    COMPETITION = "competition"
    EVENT = "event"


class EventStatus(str, Enum):
    """Time-derived event status — see core/derive_event_status.py."""
    ACTIVE = "active"
    ENDED = "ended"
    UPCOMING = "upcoming"


class ForumCategory(str, Enum):
    TRADING_TIPS = "trading_tips"
    SCAMMER_REPORTS = "scammer_reports"
    GAME_UPDATES = "game_updates"
    GENERAL = "general"


class ReportStatus(str, Enum):
    """Report review states, forward-only."""
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"


class VoteDirection(str, Enum):
    UP = "up"
    DOWN = "down"


class ReviewRequest(str, Enum):
    """User-raised requests that staff approve or reject."""
    VERIFICATION = "verification"
    MIDDLEMAN = "middleman"
