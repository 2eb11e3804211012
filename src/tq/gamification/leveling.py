"""Level computation from experience.

Level is a pure function of experience: every 100 XP is one level, starting
at level 1. The stored ``accounts.level`` column is only a cache of
``level_for(experience)``. Rank titles decorate levels for display.
"""

from __future__ import annotations

XP_PER_LEVEL = 100

RANKS: list[dict] = [
    {"level": 1, "title": "Initiate", "description": "The start of the self-knowledge journey."},
    {"level": 2, "title": "Mind Warrior", "description": "Facing the first emotional challenges."},
    {"level": 3, "title": "Apprentice of Calm", "description": "Discovering the power of mindful breathing."},
    {"level": 4, "title": "Guardian of Focus", "description": "Keeping attention in the present moment."},
    {"level": 5, "title": "Master of Emotions", "description": "Riding the waves of feeling with wisdom."},
    {"level": 6, "title": "Inner Sage", "description": "Deep connection with the true self."},
    {"level": 7, "title": "Enlightened", "description": "Flow and full acceptance of reality."},
]


def level_for(experience: int) -> int:
    """Level for a non-negative experience total (level 1 at 0 XP)."""
    return max(experience, 0) // XP_PER_LEVEL + 1


def progress_in_level(experience: int) -> int:
    """XP accumulated inside the current level (0..99)."""
    return max(experience, 0) % XP_PER_LEVEL


def xp_for_level(level: int) -> int:
    """Minimum experience needed to reach ``level``."""
    return (max(level, 1) - 1) * XP_PER_LEVEL


def xp_to_next_level(experience: int) -> int:
    return xp_for_level(level_for(experience) + 1) - max(experience, 0)


def level_progress_percent(experience: int) -> float:
    return progress_in_level(experience) / XP_PER_LEVEL * 100


def rank_for_level(level: int) -> dict:
    """Highest rank whose level is at or below ``level``."""
    for rank in reversed(RANKS):
        if level >= rank["level"]:
            return rank
    return RANKS[0]


def compute_level(experience: int) -> dict:
    """Full level info for API payloads."""
    level = level_for(experience)
    rank = rank_for_level(level)
    next_rank = rank_for_level(level + 1)
    return {
        "level": level,
        "title": rank["title"],
        "xp_into_level": progress_in_level(experience),
        "xp_for_level": XP_PER_LEVEL,
        "xp_to_next_level": xp_to_next_level(experience),
        "next_level": level + 1,
        "next_title": next_rank["title"],
    }
