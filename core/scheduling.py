# =============================================================================
# core/scheduling.py - Training Session Date Calculator
# =============================================================================
# Derives the bounding dates of a training session from its format, the
# chosen weekday (monthly format only) and the date picked by the operator.
#
# Formats:
# - weekly:     Monday 09:00 -> Friday 17:00 of the anchor's ISO week
# - monthly:    4 Saturdays (or 4 Sundays) in 7-day steps from the anchor
# - fast_track: 2 consecutive days starting on the anchor
#
# Everything here is pure: no I/O, no settings lookups.
#
# Usage:
#   from core.scheduling import compute_session_dates
#   dates = compute_session_dates("monthly", "sat", date(2025, 3, 5))
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo
from enum import Enum

DEFAULT_START_HOUR = 9
DEFAULT_END_HOUR = 17

MONTHLY_OCCURRENCES = 4

_FULL_NAMES = {
    "mon": "monday",
    "tue": "tuesday",
    "wed": "wednesday",
    "thu": "thursday",
    "fri": "friday",
    "sat": "saturday",
    "sun": "sunday",
}


class TrainingFormat(str, Enum):
    """Supported training session formats."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    FAST_TRACK = "fast_track"


class Weekday(str, Enum):
    """Days of the week, ordered like date.weekday() (Monday = 0)."""
    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"
    SUN = "sun"

    @property
    def number(self) -> int:
        return list(Weekday).index(self)

    @classmethod
    def parse(cls, value: "Weekday | str | None") -> "Weekday | None":
        """
        Parse a weekday from its code ("sat") or English name ("Saturday").

        Returns None when the value is not recognised.
        """
        if value is None:
            return None
        if isinstance(value, Weekday):
            return value
        key = str(value).strip().lower()
        for day in cls:
            if key == day.value or key == _FULL_NAMES[day.value]:
                return day
        return None


WEEKEND = (Weekday.SAT, Weekday.SUN)


class InvalidWeekday(ValueError):
    """Raised when a monthly session is requested on a day other than Saturday or Sunday."""

    def __init__(self, weekday: object):
        self.weekday = weekday
        super().__init__(
            f"Invalid weekday for monthly format: {weekday!r} (expected 'sat' or 'sun')"
        )


@dataclass(frozen=True)
class SessionDates:
    """Bounding datetimes of a session plus, when relevant, each training day."""
    start_date: datetime
    end_date: datetime
    specific_dates: list[date] = field(default_factory=list)

    def as_iso(self) -> dict[str, object]:
        """Serialize for storage in the planning table."""
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "specific_dates": [d.isoformat() for d in self.specific_dates] or None,
        }


# =============================================================================
# Helpers
# =============================================================================

def _as_date(value: date | datetime) -> date:
    # datetime is a subclass of date, so check it first
    if isinstance(value, datetime):
        return value.date()
    return value


def _at(day: date, hour: int, tz: tzinfo | None) -> datetime:
    return datetime.combine(day, time(hour=hour), tzinfo=tz)


def monthly_occurrences(
    weekday: Weekday | str | None,
    anchor_date: date | datetime,
) -> list[date]:
    """
    List the 4 training days of a monthly session.

    The first occurrence is the first matching weekday on or after the
    anchor; the others follow every 7 days and may spill into the next
    calendar month.

    Raises:
        InvalidWeekday: If the weekday is not Saturday or Sunday
    """
    parsed = Weekday.parse(weekday)
    if parsed not in WEEKEND:
        raise InvalidWeekday(weekday)

    anchor = _as_date(anchor_date)
    first = anchor + timedelta(days=(parsed.number - anchor.weekday()) % 7)
    return [first + timedelta(weeks=i) for i in range(MONTHLY_OCCURRENCES)]


def next_monday(today: date | datetime) -> date:
    """Monday strictly after `today` (a Monday gives the following week's)."""
    day = _as_date(today)
    return day + timedelta(days=7 - day.weekday())


# =============================================================================
# Main Entry Point
# =============================================================================

def compute_session_dates(
    training_format: TrainingFormat | str,
    weekday: Weekday | str | None,
    anchor_date: date | datetime,
    tz: tzinfo | None = None,
    start_hour: int = DEFAULT_START_HOUR,
    end_hour: int = DEFAULT_END_HOUR,
) -> SessionDates:
    """
    Compute the start and end of a training session.

    Args:
        training_format: "weekly", "monthly" or "fast_track"
        weekday: Required for monthly ("sat" or "sun"), ignored otherwise
        anchor_date: Date chosen by the operator; time-of-day is ignored
        tz: Optional timezone attached to the returned datetimes
        start_hour: Hour the first day starts
        end_hour: Hour the last day ends

    Returns:
        SessionDates with start/end and the explicit training days
        (4 for monthly, 2 for fast-track, none for weekly)

    Raises:
        InvalidWeekday: Monthly format with a weekday other than Sat/Sun
        ValueError: Unknown training format

    Example:
        >>> compute_session_dates("fast_track", None, date(2025, 3, 5))
        SessionDates(start_date=datetime(2025, 3, 5, 9, 0), end_date=datetime(2025, 3, 6, 17, 0), ...)
    """
    fmt = TrainingFormat(training_format)
    anchor = _as_date(anchor_date)

    if fmt == TrainingFormat.WEEKLY:
        # date.weekday() is 0 for Monday and 6 for Sunday, so a Sunday
        # anchor rolls back to the Monday of the week it closes
        monday = anchor - timedelta(days=anchor.weekday())
        friday = monday + timedelta(days=4)
        assert monday.weekday() == 0 and friday.weekday() == 4
        return SessionDates(
            start_date=_at(monday, start_hour, tz),
            end_date=_at(friday, end_hour, tz),
        )

    if fmt == TrainingFormat.MONTHLY:
        days = monthly_occurrences(weekday, anchor)
        return SessionDates(
            start_date=_at(days[0], start_hour, tz),
            end_date=_at(days[-1], end_hour, tz),
            specific_dates=days,
        )

    second_day = anchor + timedelta(days=1)
    return SessionDates(
        start_date=_at(anchor, start_hour, tz),
        end_date=_at(second_day, end_hour, tz),
        specific_dates=[anchor, second_day],
    )
