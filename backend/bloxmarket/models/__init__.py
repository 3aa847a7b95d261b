"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Every reference to another entity is a plain FK column with an index

Design Decisions:
    - One file per entity family for locality
    - All models imported here so Base.metadata is complete before create_all
      or alembic autogenerate runs
"""

from bloxmarket.models.user import User, UserToken  # noqa: F401
from bloxmarket.models.trade import (  # noqa: F401
    Trade, TradeComment, TradeImage, TradeRating, TradeVote,
)
from bloxmarket.models.wishlist_item import WishlistItem  # noqa: F401
from bloxmarket.models.event import (  # noqa: F401
    Event, EventComment, EventParticipant, EventVote,
)
from bloxmarket.models.forum import ForumPost, ForumComment  # noqa: F401
from bloxmarket.models.report import Report  # noqa: F401
