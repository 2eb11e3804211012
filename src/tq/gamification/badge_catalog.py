"""Badge definitions: a static catalog keyed by badge id.

Each badge watches exactly one ``Metric``. ``Metric.AUTO`` badges are never
unlocked by the statistics pass; they are granted by an explicit trigger
(e.g. finishing onboarding).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Metric(str, enum.Enum):
    COMPLETED_TASKS = "completed_tasks"
    COMPLETED_TASKS_HIGH = "completed_tasks_high"
    COMPLETED_TASKS_MEDIUM = "completed_tasks_medium"
    COMPLETED_TASKS_LOW = "completed_tasks_low"
    TOTAL_MEDITATIONS = "total_meditations"
    TOTAL_MEDITATION_MINUTES = "total_meditation_minutes"
    TOTAL_JOURNAL_ENTRIES = "total_journal_entries"
    LONGEST_STREAK = "longest_streak"
    TOTAL_MOOD_LOGS = "total_mood_logs"
    REDEEMED_REWARDS = "redeemed_rewards"
    LEVEL = "level"
    AUTO = "auto"


@dataclass(frozen=True)
class BadgeDefinition:
    id: str
    name: str
    description: str
    icon: str
    metric: Metric
    requirement: int
    xp_reward: int = 0
    category: str = "progress"


BADGE_DEFINITIONS: list[BadgeDefinition] = [
    # Onboarding
    BadgeDefinition("apprentice", "Apprentice", "Completed the basic tutorial", "🎓",
                    Metric.AUTO, 1, xp_reward=20, category="onboarding"),
    # Wellness
    BadgeDefinition("first_breath", "First Breath", "Finished a first meditation session", "🌬️",
                    Metric.TOTAL_MEDITATIONS, 1, xp_reward=10, category="wellness"),
    BadgeDefinition("zen_master", "Zen Master", "20 minutes of meditation", "🧘",
                    Metric.TOTAL_MEDITATION_MINUTES, 20, xp_reward=50, category="wellness"),
    BadgeDefinition("analyst", "Analyst", "5 journal entries written", "🧠",
                    Metric.TOTAL_JOURNAL_ENTRIES, 5, xp_reward=50, category="wellness"),
    BadgeDefinition("self_aware", "Self Aware", "10 mood check-ins", "🌈",
                    Metric.TOTAL_MOOD_LOGS, 10, xp_reward=50, category="wellness"),
    # Consistency
    BadgeDefinition("warrior", "Warrior", "7 day streak", "⚔️",
                    Metric.LONGEST_STREAK, 7, xp_reward=100, category="consistency"),
    BadgeDefinition("unbreakable", "Unbreakable", "30 day streak", "🔥",
                    Metric.LONGEST_STREAK, 30, xp_reward=300, category="consistency"),
    # Tasks
    BadgeDefinition("doer", "Doer", "10 tasks completed", "✅",
                    Metric.COMPLETED_TASKS, 10, xp_reward=50, category="tasks"),
    BadgeDefinition("achiever", "Achiever", "50 tasks completed", "🏆",
                    Metric.COMPLETED_TASKS, 50, xp_reward=150, category="tasks"),
    BadgeDefinition("heavy_lifter", "Heavy Lifter", "10 high priority tasks completed", "🏋️",
                    Metric.COMPLETED_TASKS_HIGH, 10, xp_reward=100, category="tasks"),
    BadgeDefinition("steady_hand", "Steady Hand", "20 medium priority tasks completed", "🤲",
                    Metric.COMPLETED_TASKS_MEDIUM, 20, xp_reward=75, category="tasks"),
    BadgeDefinition("small_steps", "Small Steps", "30 low priority tasks completed", "👣",
                    Metric.COMPLETED_TASKS_LOW, 30, xp_reward=50, category="tasks"),
    # Rewards
    BadgeDefinition("treat_yourself", "Treat Yourself", "Redeemed a first reward", "🎁",
                    Metric.REDEEMED_REWARDS, 1, xp_reward=10, category="rewards"),
    # Levels
    BadgeDefinition("level_3", "Calm Apprentice", "Reached level 3", "🥉",
                    Metric.LEVEL, 3, xp_reward=25, category="levels"),
    BadgeDefinition("level_5", "Emotion Master", "Reached level 5", "🥈",
                    Metric.LEVEL, 5, xp_reward=50, category="levels"),
    BadgeDefinition("level_7", "Enlightened", "Reached level 7", "🥇",
                    Metric.LEVEL, 7, xp_reward=75, category="levels"),
    BadgeDefinition("level_10", "Beacon", "Reached level 10", "🌟",
                    Metric.LEVEL, 10, xp_reward=100, category="levels"),
]

BADGES_BY_ID: dict[str, BadgeDefinition] = {b.id: b for b in BADGE_DEFINITIONS}


def get_badge(badge_id: str) -> BadgeDefinition | None:
    return BADGES_BY_ID.get(badge_id)
