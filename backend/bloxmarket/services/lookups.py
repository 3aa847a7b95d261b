"""Reference Lookups — existence checks for referenced identifiers.

Invariants:
    - require_row raises NotFoundError naming the entity, never returns None
    - require_exists reads only the primary key
"""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bloxmarket.core.errors import NotFoundError


async def require_row(
    db: AsyncSession, model: type, entity_id: UUID, label: str | None = None,
) -> Any:
    row = await db.get(model, entity_id)
    if row is None:
        raise NotFoundError(label or model.__name__, str(entity_id))
    return row


async def require_exists(
    db: AsyncSession, model: type, entity_id: UUID, label: str | None = None,
) -> None:
    result = await db.execute(select(model.id).where(model.id == entity_id))
    if result.scalar_one_or_none() is None:
        raise NotFoundError(label or model.__name__, str(entity_id))
