"""Priority rules shared by the server and the optimistic mirror."""

from __future__ import annotations

import enum

from tq.config import Settings, get_settings


class Priority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Frequency(str, enum.Enum):
    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def reward_for_priority(priority: Priority, settings: Settings | None = None) -> tuple[int, int]:
    """(experience, points) fixed onto a task when it is created."""
    s = settings or get_settings()
    if priority is Priority.HIGH:
        return s.task_xp_high, s.task_points_high
    if priority is Priority.MEDIUM:
        return s.task_xp_medium, s.task_points_medium
    return s.task_xp_low, s.task_points_low


def quota_limit(priority: Priority, settings: Settings | None = None) -> int | None:
    """Max active tasks per day for ``priority``; None means unlimited."""
    s = settings or get_settings()
    if priority is Priority.HIGH:
        return s.task_quota_high
    if priority is Priority.MEDIUM:
        return s.task_quota_medium
    return s.task_quota_low


def has_capacity(active_count: int, limit: int | None) -> bool:
    return limit is None or active_count < limit
