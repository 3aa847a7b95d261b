"""Compare-and-Swap Writes — bounded optimistic retry keyed on (id, version).

Invariants:
    - A write only lands if the row's version is still the one the plan was computed from
    - Every successful write bumps version by exactly 1
    - Attempts are bounded; exhaustion raises ConcurrencyError, never a silent drop
    - The caller commits: rows inserted after the swap share its transaction

Design Decisions:
    - UPDATE ... WHERE version = :seen over SELECT FOR UPDATE: works identically on
      PostgreSQL and SQLite, and holds no lock while the pure plan runs
    - plan() is a callback so the pure core rule re-runs against fresh state on
      every attempt (a retried join re-checks capacity)
"""

import inspect
import logging
from typing import Any, Callable
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bloxmarket.core.errors import ConcurrencyError, ErrorContext, NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5


async def load_current(db: AsyncSession, model: type, entity_id: UUID) -> Any:
    """Fetch a row bypassing stale identity-map state."""
    result = await db.execute(
        select(model)
        .where(model.id == entity_id)
        .execution_options(populate_existing=True),
    )
    return result.scalar_one_or_none()


async def compare_and_swap(
    db: AsyncSession,
    model: type,
    entity_id: UUID,
    plan: Callable[[Any], Any],
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> tuple[Any, dict]:
    """Apply plan(row) -> {column: value} atomically against the seen version.

    plan may be async (returns an awaitable) when it needs extra reads inside
    the same transaction. Returns (row, changes) with row reloaded post-write.
    """
    entity = model.__name__
    for attempt in range(1, max_attempts + 1):
        row = await load_current(db, model, entity_id)
        if row is None:
            raise NotFoundError(entity, str(entity_id))

        seen_version = row.version
        changes = plan(row)
        if inspect.isawaitable(changes):
            changes = await changes

        result = await db.execute(
            update(model)
            .where(model.id == entity_id, model.version == seen_version)
            .values(**changes, version=seen_version + 1)
            .execution_options(synchronize_session=False),
        )
        if result.rowcount == 1:
            return await load_current(db, model, entity_id), changes

        await db.rollback()
        logger.warning(
            f"{entity} {entity_id} changed concurrently, retrying",
            extra={"entity": entity, "entity_id": entity_id, "attempt": attempt},
        )

    raise ConcurrencyError(
        f"{entity} '{entity_id}' kept changing after {max_attempts} attempts",
        ErrorContext(entity=entity, entity_id=str(entity_id)),
    )
