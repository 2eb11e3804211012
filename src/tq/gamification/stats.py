"""Statistics snapshot feeding badge evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import assert_never

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tq.db.models import (
    Account,
    JournalEntry,
    MeditationSession,
    MoodEntry,
    RewardRequest,
    TaskInstance,
)
from tq.gamification.badge_catalog import Metric
from tq.gamification.leveling import level_for


@dataclass(frozen=True)
class StatsSnapshot:
    experience: int = 0
    level: int = 1
    completed_tasks_high: int = 0
    completed_tasks_medium: int = 0
    completed_tasks_low: int = 0
    total_meditations: int = 0
    total_meditation_minutes: int = 0
    total_journal_entries: int = 0
    longest_streak: int = 0
    total_mood_logs: int = 0
    redeemed_rewards: int = 0

    @property
    def completed_tasks(self) -> int:
        return self.completed_tasks_high + self.completed_tasks_medium + self.completed_tasks_low

    def value(self, metric: Metric) -> int | None:
        """Current value of ``metric``; None for metrics with no statistic (``auto``)."""
        match metric:
            case Metric.COMPLETED_TASKS:
                return self.completed_tasks
            case Metric.COMPLETED_TASKS_HIGH:
                return self.completed_tasks_high
            case Metric.COMPLETED_TASKS_MEDIUM:
                return self.completed_tasks_medium
            case Metric.COMPLETED_TASKS_LOW:
                return self.completed_tasks_low
            case Metric.TOTAL_MEDITATIONS:
                return self.total_meditations
            case Metric.TOTAL_MEDITATION_MINUTES:
                return self.total_meditation_minutes
            case Metric.TOTAL_JOURNAL_ENTRIES:
                return self.total_journal_entries
            case Metric.LONGEST_STREAK:
                return self.longest_streak
            case Metric.TOTAL_MOOD_LOGS:
                return self.total_mood_logs
            case Metric.REDEEMED_REWARDS:
                return self.redeemed_rewards
            case Metric.LEVEL:
                return self.level
            case Metric.AUTO:
                return None
            case _:
                assert_never(metric)


async def load_snapshot(db: AsyncSession, account: Account) -> StatsSnapshot:
    """Aggregate the account's activity tables into a snapshot.

    Completed tasks count even after the task is deleted, since deletion
    never claws back the completion reward.
    """
    owner = account.id

    task_rows = await db.execute(
        select(TaskInstance.priority, func.count())
        .where(TaskInstance.owner_id == owner, TaskInstance.completed.is_(True))
        .group_by(TaskInstance.priority)
    )
    by_priority = {priority: count for priority, count in task_rows.all()}

    meditation_row = (await db.execute(
        select(func.count(), func.coalesce(func.sum(MeditationSession.minutes), 0))
        .where(MeditationSession.owner_id == owner)
    )).one()

    journal_count = (await db.execute(
        select(func.count())
        .select_from(JournalEntry)
        .where(JournalEntry.owner_id == owner, JournalEntry.deleted_at.is_(None))
    )).scalar_one()

    mood_count = (await db.execute(
        select(func.count()).select_from(MoodEntry).where(MoodEntry.owner_id == owner)
    )).scalar_one()

    redeemed_count = (await db.execute(
        select(func.count())
        .select_from(RewardRequest)
        .where(RewardRequest.owner_id == owner, RewardRequest.status == "redeemed")
    )).scalar_one()

    return StatsSnapshot(
        experience=account.experience,
        level=level_for(account.experience),
        completed_tasks_high=by_priority.get("high", 0),
        completed_tasks_medium=by_priority.get("medium", 0),
        completed_tasks_low=by_priority.get("low", 0),
        total_meditations=int(meditation_row[0]),
        total_meditation_minutes=int(meditation_row[1]),
        total_journal_entries=journal_count,
        longest_streak=account.longest_streak,
        total_mood_logs=mood_count,
        redeemed_rewards=redeemed_count,
    )
