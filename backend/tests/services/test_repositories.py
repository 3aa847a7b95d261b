"""Repository bundle — one object per entity, each honouring its contract."""

import pytest

from bloxmarket.core.repository_protocols import (
    EventRepository,
    FeedbackRepository,
    ForumRepository,
    ReportRepository,
    TradeRepository,
    UserRepository,
    WishlistRepository,
)
from bloxmarket.services.repositories import Repositories


def test_bundle_type(repos):
    assert isinstance(repos, Repositories)


@pytest.mark.parametrize("attr,protocol", [
    ("users", UserRepository),
    ("events", EventRepository),
    ("trades", TradeRepository),
    ("trade_feedback", FeedbackRepository),
    ("event_feedback", FeedbackRepository),
    ("reports", ReportRepository),
    ("forum", ForumRepository),
    ("wishlist", WishlistRepository),
])
def test_repositories_satisfy_protocols(repos, attr, protocol):
    assert isinstance(getattr(repos, attr), protocol)


def test_bundle_is_frozen(repos):
    with pytest.raises(AttributeError):
        repos.users = None
