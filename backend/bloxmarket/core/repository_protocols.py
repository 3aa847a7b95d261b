"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Each entity type has exactly one repository contract
    - Implementations (services/) are constructed once per process and passed
      by reference; there is no global model registry

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no base class
    - Async in Protocol: implementations do IO, the pure rules they call do not
"""

from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Any, Protocol, runtime_checkable
from uuid import UUID

from bloxmarket.core.domain_types import (
    EventId, PostId, ReportId, ReviewRequest, TradeId, TradeStatus, UserId,
    VoteDirection, WishlistItemId,
)


class SessionProvider(Protocol):
    """Anything that hands out transactional sessions (DatabaseSessionManager)."""
    def session(self) -> AbstractAsyncContextManager[Any]: ...


@runtime_checkable
class UserRepository(Protocol):
    async def create(
        self, username: str, email: str, password_hash: str,
        role: str = "user", **profile: object,
    ) -> Any: ...
    async def get(self, user_id: UserId) -> Any: ...
    async def update(self, user_id: UserId, **fields: object) -> Any: ...
    async def issue_token(self, user_id: UserId, token: str | None = None) -> Any: ...
    async def revoke_token(self, user_id: UserId, token: str) -> bool: ...
    async def decide_request(
        self, user_id: UserId, kind: ReviewRequest | str, approved: bool,
    ) -> Any: ...


@runtime_checkable
class EventRepository(Protocol):
    async def create(
        self, title: str, type: str, creator_id: UserId,
        start_date: datetime | None = None, end_date: datetime | None = None,
        max_participants: int | None = None, **fields: object,
    ) -> Any: ...
    async def get(self, event_id: EventId) -> Any: ...
    async def update(self, event_id: EventId, **fields: object) -> Any: ...
    async def join(self, event_id: EventId, user_id: UserId) -> Any: ...
    async def leave(self, event_id: EventId, user_id: UserId) -> Any: ...
    async def delete(self, event_id: EventId) -> None: ...


@runtime_checkable
class TradeRepository(Protocol):
    async def create(
        self, owner_id: UserId, item_offered: str,
        item_requested: str | None = None, description: str | None = None,
    ) -> Any: ...
    async def get(self, trade_id: TradeId) -> Any: ...
    async def transition(self, trade_id: TradeId, new_status: TradeStatus | str) -> Any: ...
    async def attach_image(self, trade_id: TradeId, url: str) -> Any: ...
    async def rate(
        self, trade_id: TradeId, rater_id: UserId, rating: int,
        comment: str | None = None,
    ) -> Any: ...
    async def delete(self, trade_id: TradeId) -> None: ...


@runtime_checkable
class FeedbackRepository(Protocol):
    """Comments and per-user votes on one target type (trades, events)."""
    async def add_comment(self, target_id: UUID, author_id: UserId, content: str) -> Any: ...
    async def list_comments(self, target_id: UUID) -> list: ...
    async def vote(
        self, target_id: UUID, user_id: UserId, direction: VoteDirection | str,
    ) -> Any: ...
    async def votes(self, target_id: UUID, user_id: UserId | None = None) -> Any: ...


@runtime_checkable
class ReportRepository(Protocol):
    async def create(
        self, reported_user_id: UserId, reporting_user_id: UserId, reason: str,
    ) -> Any: ...
    async def get(self, report_id: ReportId) -> Any: ...
    async def advance(self, report_id: ReportId) -> Any: ...


@runtime_checkable
class ForumRepository(Protocol):
    async def create_post(
        self, author_id: UserId, category: str, title: str, content: str,
        images: list[dict] | None = None,
    ) -> Any: ...
    async def get_post(self, post_id: PostId) -> Any: ...
    async def vote(self, post_id: PostId, direction: VoteDirection | str) -> Any: ...
    async def create_comment(
        self, post_id: PostId, author_id: UserId, content: str,
    ) -> Any: ...
    async def delete_post(self, post_id: PostId) -> None: ...


@runtime_checkable
class WishlistRepository(Protocol):
    async def add(self, owner_id: UserId, item_name: str) -> Any: ...
    async def rename(self, item_id: WishlistItemId, item_name: str) -> Any: ...
    async def list_by_owner(self, owner_id: UserId) -> list: ...
    async def remove(self, item_id: WishlistItemId) -> None: ...

