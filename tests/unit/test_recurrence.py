"""Recurrence expansion tests: weekdays are 0=Sunday .. 6=Saturday."""

from datetime import date

import pytest

from tq.errors import InvalidSelector
from tq.tasks.recurrence import expand_occurrences, sunday_weekday
from tq.tasks.rules import Frequency

# 2026-03-10 is a Tuesday
TUESDAY = date(2026, 3, 10)


class TestSundayWeekday:
    def test_sunday_is_zero(self):
        assert sunday_weekday(date(2026, 3, 8)) == 0

    def test_saturday_is_six(self):
        assert sunday_weekday(date(2026, 3, 14)) == 6

    def test_tuesday(self):
        assert sunday_weekday(TUESDAY) == 2


class TestSimpleFrequencies:
    def test_once_is_anchor_only(self):
        assert expand_occurrences(Frequency.ONCE, TUESDAY) == [TUESDAY]

    def test_daily_covers_seven_days(self):
        dates = expand_occurrences(Frequency.DAILY, TUESDAY)
        assert len(dates) == 7
        assert dates[0] == TUESDAY
        assert dates[-1] == date(2026, 3, 16)

    def test_once_ignores_selectors(self):
        assert expand_occurrences(Frequency.ONCE, TUESDAY, weekdays=[9], month_days=[0]) == [TUESDAY]


class TestWeekly:
    """Four weekly windows starting at the anchor."""

    def test_single_weekday(self):
        dates = expand_occurrences(Frequency.WEEKLY, TUESDAY, weekdays=[1])  # Mondays
        assert dates == [date(2026, 3, 16), date(2026, 3, 23), date(2026, 3, 30), date(2026, 4, 6)]

    def test_anchor_weekday_included(self):
        dates = expand_occurrences(Frequency.WEEKLY, TUESDAY, weekdays=[2])
        assert dates[0] == TUESDAY
        assert len(dates) == 4

    def test_multiple_weekdays_sorted(self):
        dates = expand_occurrences(Frequency.WEEKLY, TUESDAY, weekdays=[5, 0])  # Fri, Sun
        assert len(dates) == 8
        assert dates == sorted(dates)
        assert {sunday_weekday(d) for d in dates} == {0, 5}

    def test_duplicate_weekdays_deduplicated(self):
        once = expand_occurrences(Frequency.WEEKLY, TUESDAY, weekdays=[3])
        twice = expand_occurrences(Frequency.WEEKLY, TUESDAY, weekdays=[3, 3])
        assert once == twice

    def test_no_date_before_anchor(self):
        dates = expand_occurrences(Frequency.WEEKLY, TUESDAY, weekdays=[0, 1, 2, 3, 4, 5, 6])
        assert min(dates) == TUESDAY
        assert len(dates) == 28

    def test_empty_weekdays_rejected(self):
        with pytest.raises(InvalidSelector):
            expand_occurrences(Frequency.WEEKLY, TUESDAY, weekdays=[])

    def test_missing_weekdays_rejected(self):
        with pytest.raises(InvalidSelector):
            expand_occurrences(Frequency.WEEKLY, TUESDAY)

    def test_out_of_range_weekday_rejected(self):
        with pytest.raises(InvalidSelector):
            expand_occurrences(Frequency.WEEKLY, TUESDAY, weekdays=[7])


class TestMonthly:
    """Rest of the anchor month and the next; missing days are skipped, not clamped."""

    def test_two_months(self):
        dates = expand_occurrences(Frequency.MONTHLY, TUESDAY, month_days=[15])
        assert dates == [date(2026, 3, 15), date(2026, 4, 15)]

    def test_day_already_passed_in_anchor_month_is_dropped(self):
        dates = expand_occurrences(Frequency.MONTHLY, TUESDAY, month_days=[1])
        assert dates == [date(2026, 4, 1)]

    def test_anchor_day_itself_included(self):
        dates = expand_occurrences(Frequency.MONTHLY, TUESDAY, month_days=[10, 3])
        assert dates == [date(2026, 3, 10), date(2026, 4, 3), date(2026, 4, 10)]

    def test_february_30_skipped(self):
        dates = expand_occurrences(Frequency.MONTHLY, date(2026, 1, 15), month_days=[30])
        assert dates == [date(2026, 1, 30)]

    def test_day_31_only_in_long_months(self):
        dates = expand_occurrences(Frequency.MONTHLY, TUESDAY, month_days=[31])
        assert dates == [date(2026, 3, 31)]

    def test_year_rollover(self):
        dates = expand_occurrences(Frequency.MONTHLY, date(2026, 12, 5), month_days=[10])
        assert dates == [date(2026, 12, 10), date(2027, 1, 10)]

    def test_leap_february(self):
        dates = expand_occurrences(Frequency.MONTHLY, date(2028, 2, 1), month_days=[29])
        assert dates == [date(2028, 2, 29), date(2028, 3, 29)]

    def test_empty_days_rejected(self):
        with pytest.raises(InvalidSelector):
            expand_occurrences(Frequency.MONTHLY, TUESDAY, month_days=[])

    @pytest.mark.parametrize("day", [0, 32])
    def test_out_of_range_day_rejected(self, day):
        with pytest.raises(InvalidSelector):
            expand_occurrences(Frequency.MONTHLY, TUESDAY, month_days=[day])
