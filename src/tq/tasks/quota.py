"""Per-day, per-priority active task counters.

One row per (owner, due_date, priority), incremented on create and
decremented on delete, so quota checks are a single indexed lookup.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tq.db.models import TaskDayCounter


async def get_counter(
    db: AsyncSession,
    owner_id: int,
    due_date: date,
    priority: str,
) -> TaskDayCounter:
    """Fetch the counter row for a slot, creating it at zero if missing.

    Callers hold the owner's account lock, so two requests never create
    the same slot concurrently.
    """
    result = await db.execute(
        select(TaskDayCounter).where(
            TaskDayCounter.owner_id == owner_id,
            TaskDayCounter.due_date == due_date,
            TaskDayCounter.priority == priority,
        )
    )
    counter = result.scalar_one_or_none()
    if counter is None:
        counter = TaskDayCounter(owner_id=owner_id, due_date=due_date, priority=priority, active_count=0)
        db.add(counter)
        await db.flush()
    return counter


async def active_counts(
    db: AsyncSession,
    owner_id: int,
    start: date | None = None,
) -> dict[tuple[date, str], int]:
    """Non-zero counters for an owner, optionally from ``start`` onwards."""
    stmt = select(TaskDayCounter).where(
        TaskDayCounter.owner_id == owner_id,
        TaskDayCounter.active_count > 0,
    )
    if start is not None:
        stmt = stmt.where(TaskDayCounter.due_date >= start)
    result = await db.execute(stmt)
    return {(c.due_date, c.priority): c.active_count for c in result.scalars()}


async def release_slot(db: AsyncSession, owner_id: int, due_date: date, priority: str) -> None:
    counter = await get_counter(db, owner_id, due_date, priority)
    counter.active_count = max(0, counter.active_count - 1)
