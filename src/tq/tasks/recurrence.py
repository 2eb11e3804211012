"""Expansion of a recurring task template into dated occurrences.

Weekdays use 0=Sunday .. 6=Saturday. Days of month run 1..31; a day that
does not exist in a month (e.g. 30 in February) is skipped, not clamped.
``rrule`` skips such days on its own. No occurrence falls before the anchor.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta

from dateutil.relativedelta import relativedelta
from dateutil.rrule import DAILY, MONTHLY, WEEKLY, rrule

from tq.errors import InvalidSelector
from tq.tasks.rules import Frequency

DAILY_SPAN_DAYS = 7
WEEKLY_WINDOWS = 4
MONTHLY_SPAN_MONTHS = 2


def sunday_weekday(d: date) -> int:
    """Weekday with Sunday as 0 (Python's ``date.weekday`` has Monday as 0)."""
    return (d.weekday() + 1) % 7


def _to_rrule_weekday(weekday: int) -> int:
    # rrule counts from Monday like ``date.weekday``
    return (weekday - 1) % 7


def _validate(selectors: Iterable[int] | None, low: int, high: int, label: str) -> list[int]:
    values = sorted(set(selectors or ()))
    if not values:
        raise InvalidSelector(f"At least one {label} is required")
    bad = [v for v in values if v < low or v > high]
    if bad:
        raise InvalidSelector(f"{label.capitalize()} out of range {low}..{high}: {bad}")
    return values


def _dates(rule: rrule) -> list[date]:
    return sorted({occurrence.date() for occurrence in rule})


def expand_occurrences(
    frequency: Frequency,
    anchor: date,
    weekdays: Iterable[int] | None = None,
    month_days: Iterable[int] | None = None,
) -> list[date]:
    """Dates a template produces, sorted and de-duplicated.

    Raises InvalidSelector before producing anything when a weekly or
    monthly template has no (or out-of-range) selectors.
    """
    start = datetime.combine(anchor, time.min)

    if frequency is Frequency.ONCE:
        return [anchor]

    if frequency is Frequency.DAILY:
        return _dates(rrule(DAILY, dtstart=start, count=DAILY_SPAN_DAYS))

    if frequency is Frequency.WEEKLY:
        selected = _validate(weekdays, 0, 6, "weekday")
        until = start + timedelta(days=7 * WEEKLY_WINDOWS - 1)
        return _dates(rrule(
            WEEKLY,
            dtstart=start,
            until=until,
            byweekday=[_to_rrule_weekday(w) for w in selected],
        ))

    if frequency is Frequency.MONTHLY:
        selected = _validate(month_days, 1, 31, "day of month")
        until = start.replace(day=1) + relativedelta(months=MONTHLY_SPAN_MONTHS, days=-1)
        return _dates(rrule(MONTHLY, dtstart=start, until=until, bymonthday=selected))

    msg = f"Unsupported frequency: {frequency}"
    raise InvalidSelector(msg)
