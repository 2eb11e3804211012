"""Client-side optimistic mirror of the economy rules.

A front end (or any API consumer written in Python) keeps one
``OptimisticMirror`` per signed-in account. It applies the same pure rules
as the server for instant feedback, and is overwritten wholesale by every
authoritative read. It never writes anywhere and is never a source of truth.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from tq.errors import InsufficientBalance, QuotaExceeded
from tq.gamification.leveling import level_for
from tq.tasks.rules import Priority, has_capacity, quota_limit, reward_for_priority


@dataclass
class MirrorState:
    experience: int = 0
    level: int = 1
    points: int = 0
    streak: int = 0
    badges: set[str] = field(default_factory=set)
    # (due_date, priority) -> active task count
    day_counts: dict[tuple[date, str], int] = field(default_factory=dict)

    @classmethod
    def from_payload(
        cls,
        account: Mapping[str, Any],
        tasks: Iterable[Mapping[str, Any]] | None = None,
        badges: Iterable[str] | None = None,
    ) -> MirrorState:
        """Build state from ``GET /me`` (and optionally ``GET /me/tasks``, ``GET /me/badges``) payloads."""
        counts: dict[tuple[date, str], int] = {}
        for task in tasks or ():
            due = task["due_date"]
            if isinstance(due, str):
                due = date.fromisoformat(due)
            key = (due, task["priority"])
            counts[key] = counts.get(key, 0) + 1
        return cls(
            experience=int(account["experience"]),
            level=int(account["level"]),
            points=int(account["points"]),
            streak=int(account.get("streak", 0)),
            badges=set(badges or ()),
            day_counts=counts,
        )


@dataclass(frozen=True)
class Preview:
    experience: int
    level: int
    points: int
    leveled_up: bool


class OptimisticMirror:
    """Local, disposable copy of one account's economy state."""

    def __init__(self, state: MirrorState | None = None) -> None:
        self._state = state or MirrorState()

    @property
    def state(self) -> MirrorState:
        return copy.deepcopy(self._state)

    def reconcile(self, authoritative: MirrorState) -> None:
        """Replace local state with the server's (last write wins)."""
        self._state = copy.deepcopy(authoritative)

    # --- previews that also update the local copy ---

    def _apply(self, xp: int, points: int) -> Preview:
        s = self._state
        old_level = s.level
        s.experience = max(0, s.experience + xp)
        s.level = level_for(s.experience)
        s.points = max(0, s.points + points)
        return Preview(s.experience, s.level, s.points, s.level > old_level)

    def check_quota(self, due_date: date, priority: Priority) -> None:
        """Raise QuotaExceeded if the local copy says the day is full."""
        limit = quota_limit(priority)
        count = self._state.day_counts.get((due_date, priority.value), 0)
        if not has_capacity(count, limit):
            raise QuotaExceeded(f"{priority.value} quota of {limit} reached for {due_date.isoformat()}")

    def add_task(self, due_date: date, priority: Priority) -> None:
        self.check_quota(due_date, priority)
        key = (due_date, priority.value)
        self._state.day_counts[key] = self._state.day_counts.get(key, 0) + 1

    def complete_task(self, priority: Priority) -> Preview:
        xp, points = reward_for_priority(priority)
        return self._apply(xp, points)

    def uncomplete_task(self, priority: Priority) -> Preview:
        """Assumes the reversal applies; the server decides for real."""
        xp, points = reward_for_priority(priority)
        return self._apply(-xp, -points)

    def redeem(self, cost: int) -> Preview:
        if self._state.points < cost:
            raise InsufficientBalance(self._state.points, cost)
        return self._apply(0, -cost)
