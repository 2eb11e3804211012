"""XP and points grants with level recomputation and level-up detection.

``apply_experience`` is the only place ``Account.experience`` changes, so the
cached ``level`` can never drift from ``level_for(experience)`` through a
service call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from tq.db.models import Account
from tq.events import queue_event
from tq.gamification.leveling import level_for, rank_for_level, xp_for_level
from tq.timeutils import utcnow

logger = logging.getLogger(__name__)


@dataclass
class RewardOutcome:
    xp: int
    points: int
    old_level: int
    new_level: int

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level


def apply_experience(account: Account, delta: int) -> int:
    """Add ``delta`` XP (floored at 0) and recompute level. Returns the applied delta."""
    new_experience = max(0, account.experience + delta)
    applied = new_experience - account.experience
    account.experience = new_experience
    account.level = level_for(new_experience)
    return applied


def apply_points(account: Account, delta: int) -> int:
    """Add ``delta`` points (floored at 0). Returns the applied delta."""
    new_points = max(0, account.points + delta)
    applied = new_points - account.points
    account.points = new_points
    return applied


async def grant_reward(
    db: AsyncSession,
    account: Account,
    xp: int,
    points: int,
    source: str,
    now: datetime | None = None,
) -> RewardOutcome:
    """Credit XP and points to a locked account row.

    After granting:
    1. Update experience and level together
    2. Update points
    3. Flush so the badge engine sees the new totals
    4. If level changed, queue a level_up event for after commit
    """
    now = now or utcnow()
    old_level = account.level
    xp_applied = apply_experience(account, xp)
    points_applied = apply_points(account, points)
    account.updated_at = now
    await db.flush()

    logger.info(
        "Reward granted: account=%d source=%s xp=%d points=%d",
        account.id, source, xp_applied, points_applied,
    )
    outcome = RewardOutcome(xp_applied, points_applied, old_level, account.level)
    if outcome.leveled_up:
        _queue_level_up(db, account.id, old_level, account.level)
    return outcome


async def revoke_reward(
    db: AsyncSession,
    account: Account,
    xp: int,
    points: int,
    source: str,
    now: datetime | None = None,
) -> RewardOutcome:
    """Debit XP and points, each floored at 0. Amounts in the outcome are negative."""
    now = now or utcnow()
    old_level = account.level
    xp_applied = apply_experience(account, -xp)
    points_applied = apply_points(account, -points)
    account.updated_at = now
    await db.flush()

    logger.info(
        "Reward reversed: account=%d source=%s xp=%d points=%d",
        account.id, source, xp_applied, points_applied,
    )
    return RewardOutcome(xp_applied, points_applied, old_level, account.level)


def _queue_level_up(db: AsyncSession, account_id: int, old_level: int, new_level: int) -> None:
    queue_event(db, "level_up", {
        "account_id": account_id,
        "old_level": old_level,
        "new_level": new_level,
        "title": rank_for_level(new_level)["title"],
        "min_xp": xp_for_level(new_level),
    })
