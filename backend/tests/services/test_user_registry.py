"""Identity registry — uniqueness, ban group, review requests, credibility, tokens.

Invariants:
    - Duplicate username/email (case-insensitive) → ValidationError naming the field
    - role == banned <=> ban_reason and banned_at are set, after every write
    - A review decision clears the request flag; approval grants the role
    - revoke_token of an unknown token is a silent no-op
"""

from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from bloxmarket.core.clock import as_utc
from bloxmarket.core.domain_types import UserRole
from bloxmarket.core.errors import (
    InvalidTransitionError, NotFoundError, ValidationError,
)
from bloxmarket.services.user_registry import UserRegistry, _duplicate_error


async def test_create_returns_public_record(repos):
    user = await repos.users.create(
        "trader1", "Trader1@Example.com", "hash", roblox_username="RbxTrader",
    )
    assert user.username == "trader1"
    assert user.email == "trader1@example.com"
    assert user.role is UserRole.USER
    assert user.credibility_score == 0
    assert user.roblox_username == "RbxTrader"
    assert not hasattr(user, "password_hash")


async def test_duplicate_username(repos, alice):
    with pytest.raises(ValidationError) as exc:
        await repos.users.create("alice", "other@example.com", "h")
    assert exc.value.field == "username"


async def test_duplicate_email_is_case_insensitive(repos, alice):
    with pytest.raises(ValidationError) as exc:
        await repos.users.create("alice2", "ALICE@example.com", "h")
    assert exc.value.field == "email"


async def _no_precheck(db, username, email):
    return None


@pytest.mark.parametrize("username,email,field", [
    ("alice", "other@example.com", "username"),
    ("alice2", "alice@example.com", "email"),
])
async def test_unique_index_violation_names_field(
    repos, alice, monkeypatch, username, email, field,
):
    monkeypatch.setattr(UserRegistry, "_check_unique", staticmethod(_no_precheck))
    with pytest.raises(ValidationError) as exc:
        await repos.users.create(username, email, "h")
    assert exc.value.field == field


class _DriverError(Exception):
    def __init__(self, message, constraint_name=None):
        super().__init__(message)
        self.constraint_name = constraint_name


def test_duplicate_classified_by_index_not_value():
    pg_message = (
        'duplicate key value violates unique constraint "ix_users_username"\n'
        "DETAIL:  Key (username)=(myemail1) already exists."
    )
    error = _duplicate_error(IntegrityError("INSERT", {}, _DriverError(pg_message)))
    assert error.field == "username"


def test_duplicate_uses_driver_constraint_name():
    orig = _DriverError("unique violation", constraint_name="ix_users_email")
    assert _duplicate_error(IntegrityError("INSERT", {}, orig)).field == "email"


async def test_invalid_input_names_field(repos):
    with pytest.raises(ValidationError) as exc:
        await repos.users.create("", "x@example.com", "h")
    assert exc.value.field == "username"


async def test_get_unknown_user(repos):
    with pytest.raises(NotFoundError) as exc:
        await repos.users.get(uuid4())
    assert exc.value.resource_type == "User"


async def test_get_by_email(repos, alice):
    found = await repos.users.get_by_email(" ALICE@example.com ")
    assert found.id == alice.id
    assert await repos.users.get_by_email("nobody@example.com") is None


async def test_create_banned_requires_reason(repos):
    with pytest.raises(ValidationError) as exc:
        await repos.users.create("mallory", "m@example.com", "h", role="banned")
    assert exc.value.field == "ban_reason"


async def test_create_banned_with_reason(repos, clock):
    user = await repos.users.create(
        "mallory", "m@example.com", "h", role="banned", ban_reason="chargebacks",
    )
    assert user.role is UserRole.BANNED
    assert user.ban_reason == "chargebacks"
    assert as_utc(user.banned_at) == clock.now


async def test_update_profile_fields(repos, alice):
    updated = await repos.users.update(
        alice.id, bio="Collector", discord_username="alice#1", middleman_requested=True,
    )
    assert updated.bio == "Collector"
    assert updated.discord_username == "alice#1"
    assert updated.middleman_requested is True
    assert updated.role is UserRole.USER


async def test_update_rejects_unknown_field(repos, alice):
    with pytest.raises(ValidationError):
        await repos.users.update(alice.id, credibility_score=1000)


async def test_ban_writes_whole_group(repos, alice, clock):
    banned = await repos.users.ban(alice.id, "scam attempt")
    assert banned.role is UserRole.BANNED
    assert banned.ban_reason == "scam attempt"
    assert as_utc(banned.banned_at) == clock.now


async def test_ban_without_reason(repos, alice):
    with pytest.raises(ValidationError) as exc:
        await repos.users.update(alice.id, role="banned")
    assert exc.value.field == "ban_reason"
    assert (await repos.users.get(alice.id)).role is UserRole.USER


async def test_reason_without_role(repos, alice):
    with pytest.raises(ValidationError):
        await repos.users.update(alice.id, ban_reason="because")


async def test_role_change_off_banned_clears_group(repos, alice):
    await repos.users.ban(alice.id, "spam")
    verified = await repos.users.update(alice.id, role="verified")
    assert verified.role is UserRole.VERIFIED
    assert verified.ban_reason is None
    assert verified.banned_at is None


async def test_unban_restores_role(repos, alice):
    await repos.users.ban(alice.id, "spam")
    restored = await repos.users.unban(alice.id, UserRole.MIDDLEMAN)
    assert restored.role is UserRole.MIDDLEMAN
    assert restored.ban_reason is None and restored.banned_at is None


async def test_unban_requires_banned_user(repos, alice):
    with pytest.raises(InvalidTransitionError):
        await repos.users.unban(alice.id)


async def test_unban_target_cannot_be_banned(repos, alice):
    with pytest.raises(ValidationError):
        await repos.users.unban(alice.id, UserRole.BANNED)


@pytest.mark.parametrize("flag", ["verification_requested", "middleman_requested"])
async def test_request_flags_cannot_be_nulled(repos, alice, flag):
    with pytest.raises(ValidationError) as exc:
        await repos.users.update(alice.id, **{flag: None})
    assert exc.value.field == flag
    assert getattr(await repos.users.get(alice.id), flag) is False


async def test_unban_unknown_role(repos, alice):
    await repos.users.ban(alice.id, "spam")
    with pytest.raises(ValidationError) as exc:
        await repos.users.unban(alice.id, "superuser")
    assert exc.value.field == "role"
    assert (await repos.users.get(alice.id)).role is UserRole.BANNED


async def test_approve_verification_grants_role(repos, alice):
    await repos.users.update(alice.id, verification_requested=True)
    decided = await repos.users.decide_verification(alice.id, approved=True)
    assert decided.role is UserRole.VERIFIED
    assert decided.verification_requested is False


async def test_reject_middleman_keeps_role(repos, alice):
    await repos.users.update(alice.id, middleman_requested=True)
    decided = await repos.users.decide_middleman(alice.id, approved=False)
    assert decided.role is UserRole.USER
    assert decided.middleman_requested is False


async def test_decision_without_request(repos, alice):
    with pytest.raises(InvalidTransitionError):
        await repos.users.decide_middleman(alice.id, approved=True)
    assert (await repos.users.get(alice.id)).role is UserRole.USER


async def test_banned_user_cannot_be_approved(repos, alice):
    await repos.users.update(alice.id, middleman_requested=True)
    await repos.users.ban(alice.id, "chargeback")
    with pytest.raises(InvalidTransitionError):
        await repos.users.decide_middleman(alice.id, approved=True)
    stored = await repos.users.get(alice.id)
    assert stored.role is UserRole.BANNED
    assert stored.middleman_requested is True


async def test_unknown_request_kind(repos, alice):
    with pytest.raises(ValidationError) as exc:
        await repos.users.decide_request(alice.id, "partner", True)
    assert exc.value.field == "kind"


async def test_list_pending_requests(repos, alice, bob, carol):
    await repos.users.update(alice.id, middleman_requested=True)
    await repos.users.update(carol.id, middleman_requested=True)
    await repos.users.update(bob.id, verification_requested=True)
    await repos.users.decide_middleman(carol.id, approved=True)

    pending = await repos.users.list_pending_requests("middleman")
    assert [u.id for u in pending] == [alice.id]
    verification = await repos.users.list_pending_requests("verification")
    assert [u.id for u in verification] == [bob.id]


async def test_update_unknown_user(repos):
    with pytest.raises(NotFoundError):
        await repos.users.update(uuid4(), role="admin")


async def test_adjust_credibility(repos, alice):
    await repos.users.adjust_credibility(alice.id, 5)
    user = await repos.users.adjust_credibility(alice.id, -2)
    assert user.credibility_score == 3


async def test_adjust_credibility_unknown_user(repos):
    with pytest.raises(NotFoundError):
        await repos.users.adjust_credibility(uuid4(), 1)


async def test_record_login(repos, alice, clock):
    clock.advance(minutes=5)
    user = await repos.users.record_login(alice.id)
    assert as_utc(user.last_login) == clock.now


async def test_tokens_kept_in_issue_order(repos, alice, clock):
    await repos.users.issue_token(alice.id, "tok-a")
    clock.advance(seconds=1)
    await repos.users.issue_token(alice.id, "tok-b")
    tokens = await repos.users.list_tokens(alice.id)
    assert [t.token for t in tokens] == ["tok-a", "tok-b"]


async def test_issue_token_generates_value(repos, alice, clock):
    entry = await repos.users.issue_token(alice.id)
    assert len(entry.token) >= 32
    assert as_utc(entry.issued_at) == clock.now


async def test_issue_token_unknown_user(repos):
    with pytest.raises(NotFoundError):
        await repos.users.issue_token(uuid4(), "tok")


async def test_revoke_token(repos, alice, bob):
    await repos.users.issue_token(alice.id, "tok-a")
    await repos.users.issue_token(bob.id, "tok-a")

    assert await repos.users.revoke_token(alice.id, "tok-a") is True
    assert await repos.users.list_tokens(alice.id) == []
    assert [t.token for t in await repos.users.list_tokens(bob.id)] == ["tok-a"]


async def test_revoke_absent_token_is_noop(repos, alice):
    assert await repos.users.revoke_token(alice.id, "never-issued") is False
