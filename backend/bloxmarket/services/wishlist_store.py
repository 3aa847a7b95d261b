"""Wishlist Store — simple owned records with no status."""

from uuid import UUID

from sqlalchemy import delete, select

from bloxmarket.core.errors import NotFoundError
from bloxmarket.core.repository_protocols import SessionProvider
from bloxmarket.models.user import User
from bloxmarket.models.wishlist_item import WishlistItem
from bloxmarket.schemas.parse import parse_input
from bloxmarket.schemas.wishlist import WishlistItemCreate, WishlistItemRecord
from bloxmarket.services.lookups import require_exists, require_row


class WishlistStore:
    """Repository for wishlist items."""

    def __init__(self, sessions: SessionProvider):
        self._sessions = sessions

    async def add(self, owner_id: UUID, item_name: str) -> WishlistItemRecord:
        data = parse_input(
            WishlistItemCreate, {"owner_id": owner_id, "item_name": item_name},
        )
        async with self._sessions.session() as db:
            await require_exists(db, User, data.owner_id, "Owner")
            item = WishlistItem(**data.model_dump())
            db.add(item)
            await db.commit()
            await db.refresh(item)
            return WishlistItemRecord.model_validate(item)

    async def rename(self, item_id: UUID, item_name: str) -> WishlistItemRecord:
        async with self._sessions.session() as db:
            item = await require_row(db, WishlistItem, item_id, "Wishlist item")
            data = parse_input(
                WishlistItemCreate, {"owner_id": item.owner_id, "item_name": item_name},
            )
            item.item_name = data.item_name
            await db.commit()
            await db.refresh(item)
            return WishlistItemRecord.model_validate(item)

    async def list_by_owner(self, owner_id: UUID) -> list[WishlistItemRecord]:
        async with self._sessions.session() as db:
            result = await db.execute(
                select(WishlistItem)
                .where(WishlistItem.owner_id == owner_id)
                .order_by(WishlistItem.created_at, WishlistItem.id),
            )
            return [WishlistItemRecord.model_validate(i) for i in result.scalars()]

    async def remove(self, item_id: UUID) -> None:
        async with self._sessions.session() as db:
            result = await db.execute(
                delete(WishlistItem).where(WishlistItem.id == item_id),
            )
            if result.rowcount == 0:
                raise NotFoundError("Wishlist item", str(item_id))
            await db.commit()
