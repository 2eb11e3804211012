"""Streak boundary tests on the account's local calendar."""

from datetime import date, datetime, timezone

from tq.db.models import Account
from tq.gamification.streak_service import next_streak, record_activity


def _account(**kwargs) -> Account:
    defaults = {
        "id": 1,
        "display_name": "Ana",
        "streak": 0,
        "longest_streak": 0,
        "last_activity_date": None,
        "timezone_name": "America/Sao_Paulo",
    }
    defaults.update(kwargs)
    return Account(**defaults)


class TestNextStreak:
    """Pure streak transition."""

    def test_first_activity(self):
        assert next_streak(0, None, date(2026, 3, 10)) == 1

    def test_same_day_keeps_streak(self):
        assert next_streak(4, date(2026, 3, 10), date(2026, 3, 10)) == 4

    def test_next_day_extends(self):
        assert next_streak(4, date(2026, 3, 9), date(2026, 3, 10)) == 5

    def test_gap_resets(self):
        assert next_streak(4, date(2026, 3, 7), date(2026, 3, 10)) == 1

    def test_clock_going_backwards_resets(self):
        assert next_streak(4, date(2026, 3, 11), date(2026, 3, 10)) == 1

    def test_month_boundary(self):
        assert next_streak(2, date(2026, 2, 28), date(2026, 3, 1)) == 3


class TestRecordActivity:
    """Streak updates use the local day, not the UTC day."""

    def test_updates_longest(self):
        account = _account(streak=6, longest_streak=6, last_activity_date=date(2026, 3, 9))
        changed = record_activity(account, datetime(2026, 3, 10, 15, 0, tzinfo=timezone.utc))
        assert changed is True
        assert account.streak == 7
        assert account.longest_streak == 7
        assert account.last_activity_date == date(2026, 3, 10)

    def test_longest_survives_reset(self):
        account = _account(streak=9, longest_streak=12, last_activity_date=date(2026, 3, 1))
        record_activity(account, datetime(2026, 3, 10, 15, 0, tzinfo=timezone.utc))
        assert account.streak == 1
        assert account.longest_streak == 12

    def test_late_evening_counts_as_local_day(self):
        """01:30 UTC on the 11th is still the 10th in Sao Paulo (UTC-3)."""
        account = _account(streak=3, longest_streak=3, last_activity_date=date(2026, 3, 10))
        changed = record_activity(account, datetime(2026, 3, 11, 1, 30, tzinfo=timezone.utc))
        assert changed is False
        assert account.streak == 3
        assert account.last_activity_date == date(2026, 3, 10)

    def test_utc_account_rolls_over_at_midnight(self):
        account = _account(streak=3, longest_streak=3, last_activity_date=date(2026, 3, 10), timezone_name="UTC")
        record_activity(account, datetime(2026, 3, 11, 1, 30, tzinfo=timezone.utc))
        assert account.streak == 4
        assert account.last_activity_date == date(2026, 3, 11)
