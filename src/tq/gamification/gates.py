"""Daily-cap and cooldown gates for wellness bonuses.

Pure functions over the account's stored markers. The caller applies the
returned decision to the locked account row.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta


@dataclass(frozen=True)
class MeditationDecision:
    grant_bonus: bool
    daily_count: int  # value to store after this session


def meditation_gate(
    daily_count: int,
    last_session_day: date | None,
    today: date,
    daily_cap: int,
) -> MeditationDecision:
    """Decide whether a meditation session earns the bonus.

    The per-day counter resets on the first session of a later local day.
    A local day that moves backwards (timezone change) keeps the counter.
    """
    if last_session_day is None or today > last_session_day:
        daily_count = 0
    if daily_count < daily_cap:
        return MeditationDecision(grant_bonus=True, daily_count=daily_count + 1)
    return MeditationDecision(grant_bonus=False, daily_count=daily_count)


def mood_cooldown_elapsed(
    last_bonus_at: datetime | None,
    now: datetime,
    cooldown_seconds: float,
) -> bool:
    """True when at least ``cooldown_seconds`` passed since the last mood bonus."""
    if last_bonus_at is None:
        return True
    return now - last_bonus_at >= timedelta(seconds=cooldown_seconds)


def once_per_day(last_bonus_day: date | None, today: date) -> bool:
    return last_bonus_day is None or today > last_bonus_day
