"""Badge unlock engine with self-healing reconciliation.

The set of active unlocks is kept equal to what the current statistics
justify. ``reconcile`` computes the difference as a pure function;
``check_and_unlock`` applies it to the database inside the caller's
transaction and repeats until nothing changes, since badge bonus XP can
itself qualify further level badges.

Revocation is soft: the row keeps ``unlocked_at`` and ``bonus_xp`` so a
badge that qualifies again is restored without a second bonus.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tq.accounts.service import lock_account
from tq.db.models import Account, BadgeUnlock
from tq.errors import InvalidState, NotFound
from tq.events import queue_event
from tq.gamification.badge_catalog import BADGE_DEFINITIONS, BadgeDefinition, Metric, get_badge
from tq.gamification.leveling import level_for
from tq.gamification.stats import StatsSnapshot, load_snapshot
from tq.gamification.xp_service import grant_reward
from tq.timeutils import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reconciliation:
    to_revoke: tuple[str, ...] = ()
    to_unlock: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.to_revoke and not self.to_unlock


@dataclass
class BadgeCheckResult:
    new_badges: list[str] = field(default_factory=list)
    revoked: list[str] = field(default_factory=list)
    restored: list[str] = field(default_factory=list)
    bonus_xp: int = 0

    def merge(self, other: BadgeCheckResult) -> None:
        self.new_badges.extend(other.new_badges)
        self.revoked.extend(other.revoked)
        self.restored.extend(other.restored)
        self.bonus_xp += other.bonus_xp


def reconcile(
    active_unlocks: Iterable[str],
    snapshot: StatsSnapshot,
    catalog: Sequence[BadgeDefinition] = BADGE_DEFINITIONS,
) -> Reconciliation:
    """Badges to revoke and to unlock for ``snapshot``.

    Only level badges are ever revoked. ``auto`` badges are never unlocked
    here. Active ids missing from the catalog are left untouched.
    """
    active = set(active_unlocks)
    to_revoke: list[str] = []
    to_unlock: list[str] = []

    for badge in catalog:
        if badge.id in active:
            if badge.metric is Metric.LEVEL and snapshot.level < badge.requirement:
                to_revoke.append(badge.id)
            continue
        value = snapshot.value(badge.metric)
        if value is not None and value >= badge.requirement:
            to_unlock.append(badge.id)

    return Reconciliation(tuple(to_revoke), tuple(to_unlock))


async def _load_unlocks(db: AsyncSession, account_id: int) -> dict[str, BadgeUnlock]:
    result = await db.execute(select(BadgeUnlock).where(BadgeUnlock.account_id == account_id))
    return {row.badge_id: row for row in result.scalars()}


async def _apply_unlock(
    db: AsyncSession,
    account: Account,
    badge: BadgeDefinition,
    rows: dict[str, BadgeUnlock],
    result: BadgeCheckResult,
    now: datetime,
) -> None:
    """Insert or restore one unlock. Bonus XP is paid only on first unlock."""
    row = rows.get(badge.id)
    if row is not None:
        row.revoked_at = None
        if badge.id in result.revoked:
            result.revoked.remove(badge.id)
        else:
            result.restored.append(badge.id)
        logger.info("Badge restored: account=%d badge=%s", account.id, badge.id)
        return

    row = BadgeUnlock(
        account_id=account.id,
        badge_id=badge.id,
        unlocked_at=now,
        bonus_xp=badge.xp_reward,
    )
    db.add(row)
    rows[badge.id] = row
    result.new_badges.append(badge.id)
    logger.info("Badge unlocked: account=%d badge=%s bonus=%d", account.id, badge.id, badge.xp_reward)

    if badge.xp_reward:
        outcome = await grant_reward(db, account, badge.xp_reward, 0, f"badge:{badge.id}", now)
        result.bonus_xp += outcome.xp

    queue_event(db, "badge_unlocked", {
        "account_id": account.id,
        "badge_id": badge.id,
        "badge_name": badge.name,
        "xp_reward": badge.xp_reward,
    })


async def reconcile_account(
    db: AsyncSession,
    account: Account,
    now: datetime,
) -> BadgeCheckResult:
    result = BadgeCheckResult()

    expected_level = level_for(account.experience)
    if account.level != expected_level:
        logger.warning(
            "Level cache drift repaired: account=%d stored=%d expected=%d",
            account.id, account.level, expected_level,
        )
        account.level = expected_level

    rows = await _load_unlocks(db, account.id)
    base = await load_snapshot(db, account)

    # Terminates: level only rises inside the loop, so each badge is revoked
    # at most once and unlocked at most once.
    while True:
        snapshot = dataclasses.replace(
            base, experience=account.experience, level=level_for(account.experience),
        )
        active = [badge_id for badge_id, row in rows.items() if row.revoked_at is None]
        plan = reconcile(active, snapshot)
        if plan.is_empty:
            break

        for badge_id in plan.to_revoke:
            rows[badge_id].revoked_at = now
            result.revoked.append(badge_id)
            logger.info("Badge revoked: account=%d badge=%s", account.id, badge_id)

        for badge_id in plan.to_unlock:
            badge = get_badge(badge_id)
            if badge is not None:
                await _apply_unlock(db, account, badge, rows, result, now)

    await db.flush()
    return result


async def check_and_unlock(
    db: AsyncSession,
    account_id: int,
    now: datetime | None = None,
) -> BadgeCheckResult:
    """Self-heal level badges, unlock newly satisfied ones, and pay first-time bonuses.

    Idempotent: a second call with no statistic change in between returns an
    empty result and changes nothing.
    """
    if now is None:
        now = utcnow()
    account = await lock_account(db, account_id)
    return await reconcile_account(db, account, now)


async def unlock_auto_badge(
    db: AsyncSession,
    account_id: int,
    badge_id: str,
    now: datetime | None = None,
) -> BadgeCheckResult:
    """Explicitly unlock an ``auto`` badge, then run the regular pass."""
    if now is None:
        now = utcnow()
    badge = get_badge(badge_id)
    if badge is None:
        raise NotFound(f"Badge {badge_id} not found")
    if badge.metric is not Metric.AUTO:
        raise InvalidState(f"Badge {badge_id} is unlocked by statistics, not explicitly")

    account = await lock_account(db, account_id)
    rows = await _load_unlocks(db, account.id)
    result = BadgeCheckResult()

    existing = rows.get(badge_id)
    if existing is None or existing.revoked_at is not None:
        await _apply_unlock(db, account, badge, rows, result, now)

    result.merge(await reconcile_account(db, account, now))
    return result
