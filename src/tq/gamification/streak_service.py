"""Daily streak tracking on the account's local calendar."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from tq.db.models import Account
from tq.timeutils import local_date, utcnow

logger = logging.getLogger(__name__)


def next_streak(current: int, last_activity: date | None, today: date) -> int:
    """Streak after activity on ``today``.

    Same day keeps the streak, the following day extends it, any other gap
    (or a clock that went backwards) starts over at 1.
    """
    if last_activity is None:
        return 1
    if last_activity == today:
        return max(current, 1)
    if last_activity + timedelta(days=1) == today:
        return current + 1
    return 1


def record_activity(account: Account, now: datetime | None = None) -> bool:
    """Advance the account's streak for activity at ``now``.

    Returns True if the streak value changed.
    """
    if now is None:
        now = utcnow()
    today = local_date(now, account.timezone_name)
    updated = next_streak(account.streak, account.last_activity_date, today)
    changed = updated != account.streak

    account.streak = updated
    account.longest_streak = max(account.longest_streak, updated)
    account.last_activity_date = today

    if changed:
        logger.info("Streak updated: account=%d streak=%d", account.id, updated)
    return changed
