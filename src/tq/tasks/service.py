"""Task creation, completion toggling, deletion and listing."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession

from tq.accounts.service import lock_account, require_supervision
from tq.config import get_settings
from tq.db.models import Account, TaskInstance
from tq.errors import NotFound, PastDate
from tq.gamification.badge_engine import BadgeCheckResult, reconcile_account
from tq.gamification.streak_service import record_activity
from tq.gamification.xp_service import grant_reward, revoke_reward
from tq.tasks.quota import get_counter, release_slot
from tq.tasks.recurrence import expand_occurrences
from tq.tasks.rules import Frequency, Priority, has_capacity, quota_limit, reward_for_priority
from tq.timeutils import local_date, utcnow

logger = logging.getLogger(__name__)


@dataclass
class SkippedOccurrence:
    due_date: date
    limit: int
    reason: str = "quota_exceeded"


@dataclass
class TaskCreationResult:
    created: list[TaskInstance] = field(default_factory=list)
    skipped: list[SkippedOccurrence] = field(default_factory=list)


@dataclass
class ToggleResult:
    task: TaskInstance
    status: str
    xp_awarded: int = 0
    points_awarded: int = 0
    leveled_up: bool = False
    badges: BadgeCheckResult = field(default_factory=BadgeCheckResult)

    @property
    def new_badges(self) -> list[str]:
        return self.badges.new_badges


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


async def create_tasks(
    db: AsyncSession,
    caller: Account,
    owner_id: int,
    title: str,
    priority: Priority,
    frequency: Frequency,
    anchor: date | None = None,
    weekdays: Iterable[int] | None = None,
    month_days: Iterable[int] | None = None,
    now: datetime | None = None,
) -> TaskCreationResult:
    """Expand a template into task rows, skipping occurrences over the daily quota.

    Partial success: occurrences on full days are reported in ``skipped``
    rather than failing the batch. A supervisor may create tasks for an
    account it supervises. ``anchor`` defaults to today in the owner's
    timezone; an anchor before that day raises PastDate.
    """
    if owner_id != caller.id:
        await require_supervision(db, caller, owner_id)
    owner = await lock_account(db, owner_id)
    today = local_date(now or utcnow(), owner.timezone_name)
    if anchor is None:
        anchor = today
    elif anchor < today:
        raise PastDate(f"Cannot create tasks for {anchor.isoformat()}, which has already passed")

    # Raises InvalidSelector before any row is written
    occurrences = expand_occurrences(frequency, anchor, weekdays, month_days)

    limit = quota_limit(priority)
    experience_reward, points_reward = reward_for_priority(priority)
    result = TaskCreationResult()

    for due in occurrences:
        counter = await get_counter(db, owner_id, due, priority.value)
        if not has_capacity(counter.active_count, limit):
            result.skipped.append(SkippedOccurrence(due_date=due, limit=limit or 0))
            continue
        task = TaskInstance(
            owner_id=owner_id,
            created_by_id=caller.id,
            title=title,
            priority=priority.value,
            due_date=due,
            frequency=frequency.value,
            completed=False,
            experience_reward=experience_reward,
            points_reward=points_reward,
        )
        db.add(task)
        counter.active_count += 1
        result.created.append(task)

    await db.flush()
    logger.info(
        "Tasks created: owner=%d priority=%s frequency=%s created=%d skipped=%d",
        owner_id, priority.value, frequency.value, len(result.created), len(result.skipped),
    )
    return result


# ---------------------------------------------------------------------------
# Completion state machine
# ---------------------------------------------------------------------------


async def _get_owned_task(db: AsyncSession, account_id: int, task_id: int) -> TaskInstance:
    result = await db.execute(
        select(TaskInstance).where(
            TaskInstance.id == task_id,
            TaskInstance.owner_id == account_id,
            TaskInstance.deleted_at.is_(None),
        )
    )
    task = result.scalar_one_or_none()
    if task is None:
        raise NotFound(f"Task {task_id} not found")
    return task


async def toggle_task_completion(
    db: AsyncSession,
    account_id: int,
    task_id: int,
    now: datetime | None = None,
) -> ToggleResult:
    """Complete a pending task or un-complete a completed one.

    Un-completing reverses the reward only when the account's last task
    award happened within the reversal window of this task's completion.
    Otherwise another completion is assumed to have earned the last award
    and nothing is reversed.
    """
    if now is None:
        now = utcnow()
    account = await lock_account(db, account_id)
    task = await _get_owned_task(db, account_id, task_id)
    old_level = account.level

    if not task.completed:
        task.completed = True
        task.completed_at = now
        account.last_task_xp_at = now
        outcome = await grant_reward(
            db, account, task.experience_reward, task.points_reward, f"task:{task.id}", now,
        )
        record_activity(account, now)
        result = ToggleResult(
            task=task, status="completed", xp_awarded=outcome.xp, points_awarded=outcome.points,
        )
    else:
        completed_at = task.completed_at
        task.completed = False
        task.completed_at = None
        result = ToggleResult(task=task, status="pending")

        window = timedelta(seconds=get_settings().reversal_window_seconds)
        last_award = account.last_task_xp_at
        if last_award is not None and completed_at is not None and abs(last_award - completed_at) < window:
            outcome = await revoke_reward(
                db, account, task.experience_reward, task.points_reward, f"task:{task.id}", now,
            )
            account.last_task_xp_at = None
            result.xp_awarded = outcome.xp
            result.points_awarded = outcome.points
        else:
            logger.info("Task %d un-completed without reversal: last award not attributable", task.id)

    result.badges = await reconcile_account(db, account, now)
    result.leveled_up = account.level > old_level
    return result


# ---------------------------------------------------------------------------
# Deletion and listing
# ---------------------------------------------------------------------------


async def delete_task(
    db: AsyncSession,
    account_id: int,
    task_id: int,
    now: datetime | None = None,
) -> TaskInstance:
    """Soft-delete a task and free its quota slot. Rewards are not touched."""
    if now is None:
        now = utcnow()
    await lock_account(db, account_id)
    task = await _get_owned_task(db, account_id, task_id)
    task.deleted_at = now
    await release_slot(db, account_id, task.due_date, task.priority)
    await db.flush()
    logger.info("Task deleted: account=%d task=%d", account_id, task_id)
    return task


async def list_tasks(
    db: AsyncSession,
    account_id: int,
    start: date | None = None,
    end: date | None = None,
) -> list[TaskInstance]:
    """Active tasks ordered by due date, then priority (high first)."""
    priority_order = case(
        (TaskInstance.priority == Priority.HIGH.value, 0),
        (TaskInstance.priority == Priority.MEDIUM.value, 1),
        else_=2,
    )
    stmt = select(TaskInstance).where(
        TaskInstance.owner_id == account_id,
        TaskInstance.deleted_at.is_(None),
    )
    if start is not None:
        stmt = stmt.where(TaskInstance.due_date >= start)
    if end is not None:
        stmt = stmt.where(TaskInstance.due_date <= end)
    result = await db.execute(stmt.order_by(TaskInstance.due_date, priority_order, TaskInstance.id))
    return list(result.scalars())
