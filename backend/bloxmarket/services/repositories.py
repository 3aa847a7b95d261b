"""Repository Bundle — one repository object per entity type, built once per process.

Invariants:
    - build_repositories is the only place repositories are constructed
    - All repositories share one session provider, one clock and one retry budget

Design Decisions:
    - Frozen dataclass passed by reference (app.state.repositories) instead of a
      module-level registry of model handles
"""

from dataclasses import dataclass

from bloxmarket.core.clock import Clock, utc_now
from bloxmarket.core.repository_protocols import SessionProvider
from bloxmarket.models.event import Event, EventComment, EventVote
from bloxmarket.models.trade import Trade, TradeComment, TradeVote
from bloxmarket.services.atomic_update import DEFAULT_MAX_ATTEMPTS
from bloxmarket.services.event_roster import EventRoster
from bloxmarket.services.feedback_board import FeedbackBoard
from bloxmarket.services.forum_content import ForumContent
from bloxmarket.services.report_workflow import ReportWorkflow
from bloxmarket.services.trade_workflow import TradeWorkflow
from bloxmarket.services.user_registry import UserRegistry
from bloxmarket.services.wishlist_store import WishlistStore


@dataclass(frozen=True)
class Repositories:
    users: UserRegistry
    events: EventRoster
    event_feedback: FeedbackBoard
    trades: TradeWorkflow
    trade_feedback: FeedbackBoard
    reports: ReportWorkflow
    forum: ForumContent
    wishlist: WishlistStore


def build_repositories(
    sessions: SessionProvider,
    clock: Clock = utc_now,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Repositories:
    return Repositories(
        users=UserRegistry(sessions, clock, max_attempts),
        events=EventRoster(sessions, clock, max_attempts),
        event_feedback=FeedbackBoard(
            sessions, Event, EventComment, EventVote, clock, max_attempts,
        ),
        trades=TradeWorkflow(sessions, clock, max_attempts),
        trade_feedback=FeedbackBoard(
            sessions, Trade, TradeComment, TradeVote, clock, max_attempts,
        ),
        reports=ReportWorkflow(sessions, max_attempts),
        forum=ForumContent(sessions),
        wishlist=WishlistStore(sessions),
    )
