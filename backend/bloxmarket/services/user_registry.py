"""Identity Registry — accounts, roles, bans, review requests, credibility, session tokens.

Invariants:
    - Duplicate username/email raises ValidationError whether caught by the
      pre-check or by the unique index (IntegrityError)
    - role/ban_reason/banned_at are written as one compare-and-swap group
    - Request decisions clear the request flag and apply any granted role in
      the same compare-and-swap write
    - revoke_token of an absent token is a silent no-op (returns False)
    - password_hash is accepted pre-hashed and never returned

Design Decisions:
    - Pre-check gives precise field errors; the unique index is what actually
      guarantees uniqueness under concurrent inserts
    - Credibility and last_login are single-statement updates outside the version
      group: they share no invariant with the role columns
"""

import logging
import secrets
from uuid import UUID

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError

from bloxmarket.core.clock import Clock, utc_now
from bloxmarket.core.domain_types import ReviewRequest, UserRole
from bloxmarket.core.enforce_ban import plan_role_change
from bloxmarket.core.enforce_requests import REQUEST_FLAGS, plan_request_decision
from bloxmarket.core.errors import (
    InvalidTransitionError, NotFoundError, ValidationError,
)
from bloxmarket.core.repository_protocols import SessionProvider
from bloxmarket.models.user import User, UserToken
from bloxmarket.schemas.parse import parse_input
from bloxmarket.schemas.user import (
    SessionTokenRecord, UserCreate, UserRecord, UserUpdate,
)
from bloxmarket.services.atomic_update import (
    DEFAULT_MAX_ATTEMPTS, compare_and_swap, load_current,
)
from bloxmarket.services.lookups import require_exists, require_row

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = {
    "roblox_username", "avatar_url", "bio", "discord_username", "timezone",
}


class UserRegistry:
    """Repository for User rows and their session tokens."""

    def __init__(
        self,
        sessions: SessionProvider,
        clock: Clock = utc_now,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self._sessions = sessions
        self._clock = clock
        self._max_attempts = max_attempts

    async def create(
        self,
        username: str,
        email: str,
        password_hash: str,
        role: UserRole | str = UserRole.USER,
        **profile: object,
    ) -> UserRecord:
        """Register an account. Banned-at-creation requires ban_reason."""
        data = parse_input(UserCreate, {
            "username": username, "email": email,
            "password_hash": password_hash, "role": role, **profile,
        })
        role_group = plan_role_change(data.role, data.ban_reason, self._clock())

        async with self._sessions.session() as db:
            await self._check_unique(db, data.username, data.email)
            user = User(
                username=data.username,
                email=data.email,
                password_hash=data.password_hash,
                **data.model_dump(include=_PROFILE_FIELDS),
                **role_group,
            )
            db.add(user)
            try:
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                raise _duplicate_error(exc) from exc
            await db.refresh(user)
            logger.info(
                f"User {user.username} registered",
                extra={"entity": "User", "entity_id": user.id},
            )
            return UserRecord.model_validate(user)

    async def get(self, user_id: UUID) -> UserRecord:
        async with self._sessions.session() as db:
            return UserRecord.model_validate(await require_row(db, User, user_id))

    async def get_by_email(self, email: str) -> UserRecord | None:
        """Case-insensitive lookup."""
        async with self._sessions.session() as db:
            result = await db.execute(
                select(User).where(User.email == email.strip().lower()),
            )
            user = result.scalar_one_or_none()
            return UserRecord.model_validate(user) if user else None

    async def update(self, user_id: UUID, **fields: object) -> UserRecord:
        """Write profile fields; a role change carries the whole ban group."""
        data = parse_input(UserUpdate, fields)
        changes = data.model_dump(exclude_unset=True)
        role = changes.pop("role", None)
        ban_reason = changes.pop("ban_reason", None)
        if role is None and ban_reason is not None:
            raise ValidationError(
                "ban_reason is only valid together with role 'banned'", "ban_reason",
            )
        return await self._write(user_id, changes, role, ban_reason)

    async def ban(self, user_id: UUID, reason: str) -> UserRecord:
        return await self.update(user_id, role=UserRole.BANNED, ban_reason=reason)

    async def unban(
        self, user_id: UUID, role: UserRole | str = UserRole.USER,
    ) -> UserRecord:
        """Lift a ban, restoring the given role. Fails if the user is not banned."""
        try:
            role = UserRole(role)
        except ValueError:
            raise ValidationError(f"unknown role '{role}'", "role")
        if role is UserRole.BANNED:
            raise ValidationError("unban target role cannot be 'banned'", "role")
        return await self._write(user_id, {}, role, None, require_banned=True)

    async def _write(
        self,
        user_id: UUID,
        changes: dict,
        role: UserRole | None,
        ban_reason: str | None,
        require_banned: bool = False,
    ) -> UserRecord:
        if not changes and role is None:
            return await self.get(user_id)
        now = self._clock()

        def plan(user: User) -> dict:
            planned = dict(changes)
            if require_banned and user.role != UserRole.BANNED.value:
                raise InvalidTransitionError("User", user.role, role.value)
            if role is not None:
                planned.update(plan_role_change(role, ban_reason, now))
            return planned

        async with self._sessions.session() as db:
            user, applied = await compare_and_swap(
                db, User, user_id, plan, max_attempts=self._max_attempts,
            )
            await db.commit()
            if "role" in applied:
                logger.info(
                    f"User {user_id} role set to {applied['role']}",
                    extra={"entity": "User", "entity_id": user_id, "status": applied["role"]},
                )
            return UserRecord.model_validate(user)

    async def adjust_credibility(self, user_id: UUID, delta: int) -> UserRecord:
        """Atomic in-database increment (negative delta decrements)."""
        async with self._sessions.session() as db:
            result = await db.execute(
                update(User)
                .where(User.id == user_id)
                .values(credibility_score=User.credibility_score + delta)
                .execution_options(synchronize_session=False),
            )
            if result.rowcount == 0:
                raise NotFoundError("User", str(user_id))
            await db.commit()
            return UserRecord.model_validate(await load_current(db, User, user_id))

    async def record_login(self, user_id: UUID) -> UserRecord:
        async with self._sessions.session() as db:
            result = await db.execute(
                update(User)
                .where(User.id == user_id)
                .values(last_login=self._clock())
                .execution_options(synchronize_session=False),
            )
            if result.rowcount == 0:
                raise NotFoundError("User", str(user_id))
            await db.commit()
            return UserRecord.model_validate(await load_current(db, User, user_id))

    # ─── Verification / middleman requests ───────────────────────

    async def decide_request(
        self, user_id: UUID, kind: ReviewRequest | str, approved: bool,
    ) -> UserRecord:
        """Approve or reject a pending request; approval grants the matching role."""
        try:
            kind = ReviewRequest(kind)
        except ValueError:
            raise ValidationError(f"unknown request kind '{kind}'", "kind")
        now = self._clock()

        def plan(user: User) -> dict:
            return plan_request_decision(
                kind, approved, user.role, getattr(user, REQUEST_FLAGS[kind]), now,
            )

        async with self._sessions.session() as db:
            user, _ = await compare_and_swap(
                db, User, user_id, plan, max_attempts=self._max_attempts,
            )
            await db.commit()
            outcome = "approved" if approved else "rejected"
            logger.info(
                f"User {user_id} {kind.value} request {outcome}",
                extra={"entity": "User", "entity_id": user_id, "status": user.role},
            )
            return UserRecord.model_validate(user)

    async def decide_verification(self, user_id: UUID, approved: bool) -> UserRecord:
        return await self.decide_request(user_id, ReviewRequest.VERIFICATION, approved)

    async def decide_middleman(self, user_id: UUID, approved: bool) -> UserRecord:
        return await self.decide_request(user_id, ReviewRequest.MIDDLEMAN, approved)

    async def list_pending_requests(
        self, kind: ReviewRequest | str,
    ) -> list[UserRecord]:
        """Users with an undecided request, oldest account first."""
        try:
            flag = getattr(User, REQUEST_FLAGS[ReviewRequest(kind)])
        except ValueError:
            raise ValidationError(f"unknown request kind '{kind}'", "kind")
        async with self._sessions.session() as db:
            result = await db.execute(
                select(User).where(flag.is_(True)).order_by(User.created_at, User.id),
            )
            return [UserRecord.model_validate(u) for u in result.scalars()]

    # ─── Session tokens ──────────────────────────────────────────

    async def issue_token(
        self, user_id: UUID, token: str | None = None,
    ) -> SessionTokenRecord:
        """Append {token, issued_at}; generates a token when none is supplied."""
        async with self._sessions.session() as db:
            await require_exists(db, User, user_id)
            entry = UserToken(
                user_id=user_id,
                token=token or secrets.token_urlsafe(32),
                issued_at=self._clock(),
            )
            db.add(entry)
            await db.commit()
            return SessionTokenRecord.model_validate(entry)

    async def revoke_token(self, user_id: UUID, token: str) -> bool:
        async with self._sessions.session() as db:
            result = await db.execute(
                delete(UserToken).where(
                    UserToken.user_id == user_id, UserToken.token == token,
                ),
            )
            await db.commit()
            return result.rowcount > 0

    async def list_tokens(self, user_id: UUID) -> list[SessionTokenRecord]:
        async with self._sessions.session() as db:
            result = await db.execute(
                select(UserToken)
                .where(UserToken.user_id == user_id)
                .order_by(UserToken.issued_at, UserToken.id),
            )
            return [
                SessionTokenRecord.model_validate(t) for t in result.scalars()
            ]

    # ─── Helpers ─────────────────────────────────────────────────

    @staticmethod
    async def _check_unique(db, username: str, email: str) -> None:
        result = await db.execute(
            select(User.username, User.email).where(
                or_(User.username == username, User.email == email),
            ),
        )
        for taken_username, taken_email in result.all():
            if taken_username == username:
                raise ValidationError("username is already taken", "username")
            if taken_email == email:
                raise ValidationError("email is already registered", "email")


_EMAIL_MARKERS = ("ix_users_email", "users.email")


def _constraint_name(exc: IntegrityError) -> str:
    """Violated constraint/index name as the driver reports it.

    asyncpg exposes constraint_name on the wrapped exception; sqlite only has a
    message ("UNIQUE constraint failed: users.email"). Postgres messages put the
    offending value after DETAIL, so only the first line is considered.
    """
    for source in (exc.orig, getattr(exc.orig, "__cause__", None)):
        name = getattr(source, "constraint_name", None)
        if name:
            return name
    return str(exc.orig).splitlines()[0] if str(exc.orig) else ""


def _duplicate_error(exc: IntegrityError) -> ValidationError:
    """Map a unique-index violation to the same error the pre-check raises."""
    name = _constraint_name(exc).lower()
    if any(marker in name for marker in _EMAIL_MARKERS):
        return ValidationError("email is already registered", "email")
    return ValidationError("username is already taken", "username")
