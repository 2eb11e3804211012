"""Meditation, mood check-ins and journal entries.

Each activity is always recorded. The XP/points bonus is gated: meditation
by a per-local-day cap, mood by a cooldown, journal by once per local day.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from tq.accounts.service import lock_account
from tq.config import get_settings
from tq.db.models import JournalEntry, MeditationSession, MoodEntry
from tq.errors import InvalidState
from tq.gamification.badge_engine import BadgeCheckResult, reconcile_account
from tq.gamification.gates import meditation_gate, mood_cooldown_elapsed, once_per_day
from tq.gamification.streak_service import record_activity
from tq.gamification.xp_service import grant_reward
from tq.timeutils import local_date, utcnow

logger = logging.getLogger(__name__)

MOOD_SCORES: dict[str, int] = {
    "happy": 100,
    "calm": 80,
    "neutral": 60,
    "anxious": 40,
    "sad": 30,
    "angry": 20,
}


@dataclass
class ActivityResult:
    xp_awarded: int = 0
    points_awarded: int = 0
    bonus_granted: bool = False
    leveled_up: bool = False
    badges: BadgeCheckResult = field(default_factory=BadgeCheckResult)

    @property
    def new_badges(self) -> list[str]:
        return self.badges.new_badges


@dataclass
class MeditationResult(ActivityResult):
    session: MeditationSession | None = None
    daily_count: int = 0


@dataclass
class MoodResult(ActivityResult):
    entry: MoodEntry | None = None


@dataclass
class JournalResult(ActivityResult):
    entry: JournalEntry | None = None


async def complete_meditation(
    db: AsyncSession,
    account_id: int,
    minutes: int,
    kind: str = "guided",
    now: datetime | None = None,
) -> MeditationResult:
    """Record a session. The bonus applies to the first N sessions of the local day."""
    if now is None:
        now = utcnow()
    if minutes < 0:
        raise InvalidState("Meditation minutes must be non-negative")
    settings = get_settings()
    account = await lock_account(db, account_id)
    old_level = account.level

    today = local_date(now, account.timezone_name)
    last_day = (
        local_date(account.last_meditation_at, account.timezone_name)
        if account.last_meditation_at is not None
        else None
    )
    decision = meditation_gate(account.daily_meditation_count, last_day, today, settings.meditation_daily_cap)
    account.daily_meditation_count = decision.daily_count
    account.last_meditation_at = now

    session = MeditationSession(
        owner_id=account_id,
        minutes=minutes,
        kind=kind,
        bonus_granted=decision.grant_bonus,
        created_at=now,
    )
    db.add(session)

    result = MeditationResult(session=session, daily_count=decision.daily_count)
    if decision.grant_bonus:
        outcome = await grant_reward(
            db, account, settings.meditation_xp, settings.meditation_points, "meditation", now,
        )
        record_activity(account, now)
        result.xp_awarded = outcome.xp
        result.points_awarded = outcome.points
        result.bonus_granted = True
    else:
        await db.flush()
        logger.info("Meditation recorded without bonus: account=%d daily_count=%d", account_id, decision.daily_count)

    result.badges = await reconcile_account(db, account, now)
    result.leveled_up = account.level > old_level
    return result


async def log_mood(
    db: AsyncSession,
    account_id: int,
    mood: str,
    now: datetime | None = None,
) -> MoodResult:
    """Record a mood check-in. Bonus only once the cooldown has elapsed."""
    if now is None:
        now = utcnow()
    score = MOOD_SCORES.get(mood)
    if score is None:
        raise InvalidState(f"Unknown mood: {mood}")
    settings = get_settings()
    account = await lock_account(db, account_id)
    old_level = account.level

    grant = mood_cooldown_elapsed(account.last_mood_xp_at, now, settings.mood_cooldown_seconds)
    entry = MoodEntry(owner_id=account_id, mood=mood, score=score, xp_granted=0, created_at=now)
    db.add(entry)

    result = MoodResult(entry=entry)
    if grant:
        account.last_mood_xp_at = now
        outcome = await grant_reward(db, account, settings.mood_xp, settings.mood_points, "mood", now)
        entry.xp_granted = outcome.xp
        record_activity(account, now)
        result.xp_awarded = outcome.xp
        result.points_awarded = outcome.points
        result.bonus_granted = True
    else:
        await db.flush()

    result.badges = await reconcile_account(db, account, now)
    result.leveled_up = account.level > old_level
    return result


async def create_journal_entry(
    db: AsyncSession,
    account_id: int,
    content: str,
    mood: str | None = None,
    tags: Iterable[str] | None = None,
    now: datetime | None = None,
) -> JournalResult:
    """Store a journal entry. The first entry of each local day earns the bonus.

    Text analysis is attached later by ``tq.wellness.enrichment``.
    """
    if now is None:
        now = utcnow()
    settings = get_settings()
    account = await lock_account(db, account_id)
    old_level = account.level

    today = local_date(now, account.timezone_name)
    last_day = (
        local_date(account.last_journal_xp_at, account.timezone_name)
        if account.last_journal_xp_at is not None
        else None
    )
    entry = JournalEntry(
        owner_id=account_id,
        content=content,
        mood=mood,
        tags=list(tags or []),
        xp_granted=0,
        created_at=now,
        updated_at=now,
    )
    db.add(entry)

    result = JournalResult(entry=entry)
    if once_per_day(last_day, today):
        account.last_journal_xp_at = now
        outcome = await grant_reward(
            db, account, settings.journal_xp, settings.journal_points, "journal", now,
        )
        entry.xp_granted = outcome.xp
        record_activity(account, now)
        result.xp_awarded = outcome.xp
        result.points_awarded = outcome.points
        result.bonus_granted = True
    else:
        await db.flush()

    result.badges = await reconcile_account(db, account, now)
    result.leveled_up = account.level > old_level
    return result
