# =============================================================================
# tests/test_scheduling.py - Session Date Calculator Tests
# =============================================================================
# This module contains tests for:
# - Weekly sessions (Monday -> Friday of the anchor's week)
# - Monthly sessions (4 Saturdays or Sundays, may cross a month boundary)
# - Fast-track sessions (2 consecutive days)
# - Calendar shape for anchors spread over two years
# - Weekday parsing and next_monday
# =============================================================================

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest

from core.scheduling import (
    DEFAULT_END_HOUR,
    DEFAULT_START_HOUR,
    InvalidWeekday,
    TrainingFormat,
    Weekday,
    compute_session_dates,
    monthly_occurrences,
    next_monday,
)


# =============================================================================
# Weekly
# =============================================================================

class TestWeekly:
    """Weekly sessions run Monday 09:00 to Friday 17:00."""

    def test_midweek_anchor(self):
        dates = compute_session_dates("weekly", None, date(2025, 3, 5))

        assert dates.start_date == datetime(2025, 3, 3, 9, 0)
        assert dates.end_date == datetime(2025, 3, 7, 17, 0)
        assert dates.specific_dates == []

    def test_monday_anchor_is_start(self):
        dates = compute_session_dates(TrainingFormat.WEEKLY, None, date(2025, 3, 3))

        assert dates.start_date.date() == date(2025, 3, 3)

    def test_sunday_anchor_rolls_back(self):
        """Sunday belongs to the week that started the Monday before."""
        dates = compute_session_dates("weekly", None, date(2025, 3, 9))

        assert dates.start_date.date() == date(2025, 3, 3)
        assert dates.end_date.date() == date(2025, 3, 7)

    def test_weekday_is_ignored(self):
        dates = compute_session_dates("weekly", "sat", date(2025, 3, 5))

        assert dates.start_date.weekday() == 0
        assert dates.end_date.weekday() == 4

    def test_datetime_anchor_time_is_ignored(self):
        dates = compute_session_dates("weekly", None, datetime(2025, 3, 5, 22, 30))

        assert dates.start_date == datetime(2025, 3, 3, 9, 0)


# =============================================================================
# Monthly
# =============================================================================

class TestMonthly:
    """Monthly sessions: 4 Saturdays or 4 Sundays from the anchor."""

    def test_saturdays_from_wednesday(self):
        dates = compute_session_dates("monthly", "sat", date(2025, 3, 5))

        assert dates.specific_dates == [
            date(2025, 3, 8),
            date(2025, 3, 15),
            date(2025, 3, 22),
            date(2025, 3, 29),
        ]
        assert dates.start_date == datetime(2025, 3, 8, 9, 0)
        assert dates.end_date == datetime(2025, 3, 29, 17, 0)

    def test_anchor_on_matching_day_is_included(self):
        days = monthly_occurrences("sat", date(2025, 3, 8))

        assert days[0] == date(2025, 3, 8)

    def test_spills_into_next_month(self):
        days = monthly_occurrences(Weekday.SUN, date(2025, 3, 20))

        assert days == [
            date(2025, 3, 23),
            date(2025, 3, 30),
            date(2025, 4, 6),
            date(2025, 4, 13),
        ]

    def test_full_day_name_accepted(self):
        days = monthly_occurrences("Saturday", date(2025, 3, 5))

        assert days[0] == date(2025, 3, 8)

    @pytest.mark.parametrize("weekday", ["mon", "fri", None, "", "samedi"])
    def test_invalid_weekday_raises(self, weekday):
        with pytest.raises(InvalidWeekday):
            compute_session_dates("monthly", weekday, date(2025, 3, 5))

    def test_invalid_weekday_is_value_error(self):
        with pytest.raises(ValueError):
            monthly_occurrences("wed", date(2025, 3, 5))


# =============================================================================
# Fast Track
# =============================================================================

class TestFastTrack:
    """Fast-track sessions last 2 consecutive days."""

    def test_two_days(self):
        dates = compute_session_dates("fast_track", None, date(2025, 3, 31))

        assert dates.specific_dates == [date(2025, 3, 31), date(2025, 4, 1)]
        assert dates.start_date == datetime(2025, 3, 31, 9, 0)
        assert dates.end_date == datetime(2025, 4, 1, 17, 0)


# =============================================================================
# Every Anchor
# =============================================================================

# 2024 is a leap year; the range covers Feb 29 and two year boundaries
ANCHORS = [date(2024, 1, 1) + timedelta(days=offset) for offset in range(0, 800, 3)]


class TestAcrossAnchors:
    """Shape of the computed dates for anchors spread over two years."""

    @pytest.mark.parametrize("anchor", ANCHORS, ids=str)
    def test_weekly_is_monday_to_friday_around_anchor(self, anchor):
        dates = compute_session_dates("weekly", None, anchor)

        assert dates.start_date.weekday() == 0
        assert dates.end_date.weekday() == 4
        assert (dates.start_date.hour, dates.end_date.hour) == (DEFAULT_START_HOUR, DEFAULT_END_HOUR)
        assert (dates.end_date.date() - dates.start_date.date()).days == 4
        assert dates.start_date.date() <= anchor <= dates.start_date.date() + timedelta(days=6)
        assert dates.specific_dates == []

    @pytest.mark.parametrize("weekday", ["sat", "sun"])
    @pytest.mark.parametrize("anchor", ANCHORS, ids=str)
    def test_monthly_is_four_weekly_occurrences(self, anchor, weekday):
        dates = compute_session_dates("monthly", weekday, anchor)
        days = dates.specific_dates

        assert len(days) == 4
        assert {day.weekday() for day in days} == {Weekday(weekday).number}
        assert [(later - earlier).days for earlier, later in zip(days, days[1:])] == [7, 7, 7]
        assert 0 <= (days[0] - anchor).days < 7
        assert dates.start_date == datetime.combine(days[0], time(DEFAULT_START_HOUR))
        assert dates.end_date == datetime.combine(days[-1], time(DEFAULT_END_HOUR))


# =============================================================================
# Options and Helpers
# =============================================================================

class TestOptions:
    """Timezone, hours and serialization."""

    def test_timezone_attached(self):
        paris = ZoneInfo("Europe/Paris")
        dates = compute_session_dates("fast_track", None, date(2025, 3, 5), tz=paris)

        assert dates.start_date.tzinfo == paris
        assert dates.start_date.utcoffset().total_seconds() == 3600

    def test_custom_hours(self):
        dates = compute_session_dates("weekly", None, date(2025, 3, 5), start_hour=10, end_hour=18)

        assert dates.start_date.hour == 10
        assert dates.end_date.hour == 18

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            compute_session_dates("yearly", None, date(2025, 3, 5))

    def test_as_iso(self):
        iso = compute_session_dates("fast_track", None, date(2025, 3, 5)).as_iso()

        assert iso["start_date"] == "2025-03-05T09:00:00"
        assert iso["specific_dates"] == ["2025-03-05", "2025-03-06"]

    def test_as_iso_weekly_has_no_specific_dates(self):
        iso = compute_session_dates("weekly", None, date(2025, 3, 5)).as_iso()

        assert iso["specific_dates"] is None


class TestWeekday:
    """Weekday parsing."""

    def test_number_matches_date_weekday(self):
        assert Weekday.MON.number == 0
        assert Weekday.SUN.number == 6

    @pytest.mark.parametrize("value,expected", [
        ("sat", Weekday.SAT),
        ("SUN", Weekday.SUN),
        ("  Sunday ", Weekday.SUN),
        (Weekday.TUE, Weekday.TUE),
        ("sa", None),
        (None, None),
    ])
    def test_parse(self, value, expected):
        assert Weekday.parse(value) == expected


class TestNextMonday:
    """next_monday is strictly after today."""

    def test_from_wednesday(self):
        assert next_monday(date(2025, 3, 5)) == date(2025, 3, 10)

    def test_from_monday(self):
        assert next_monday(date(2025, 3, 10)) == date(2025, 3, 17)

    def test_from_sunday(self):
        assert next_monday(date(2025, 3, 9)) == date(2025, 3, 10)
