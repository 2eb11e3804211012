"""Clock and calendar-day helpers.

All timestamps are stored in UTC. Calendar-day rules (meditation cap,
journal bonus, streaks) are evaluated in the account's local timezone.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tq.config import get_settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@lru_cache(maxsize=64)
def resolve_zone(name: str | None) -> ZoneInfo:
    """Resolve an IANA zone name, falling back to the configured default."""
    fallback = get_settings().default_timezone
    try:
        return ZoneInfo(name or fallback)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo(fallback)


def local_date(moment: datetime, zone_name: str | None = None) -> date:
    """Calendar day of ``moment`` as seen in the given timezone."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(resolve_zone(zone_name)).date()
