"""Time and calendar utilities.

Date keys are always rendered in local time. Formatting a local midnight
through UTC shifts the key to the previous day in timezones ahead of UTC
and misclassifies late-evening dates behind it, so nothing here goes
through UTC.
"""

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional, Union

from schoolstaffing.domain.models import (
    SchoolClosure,
    TimeWindow,
    Weekday,
)
from schoolstaffing.errors import WeekendDateError

WEEKDAYS = list(Weekday)

DateLike = Union[date, datetime]


def to_local_date(value: DateLike, tz: Optional[tzinfo] = None) -> date:
    """Reduce a date or datetime to the calendar day it falls on locally.

    Aware datetimes are converted to ``tz`` (or the system local zone)
    first; naive datetimes are taken to already be local.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    return value


def weekday_key_of(value: DateLike, tz: Optional[tzinfo] = None) -> Weekday:
    """Map a date to its school weekday.

    Raises:
        WeekendDateError: For Saturdays and Sundays.
    """
    d = to_local_date(value, tz)
    index = d.weekday()
    if index > 4:
        raise WeekendDateError(f"{d.isoformat()} is not a school weekday")
    return WEEKDAYS[index]


def is_school_day(value: DateLike, tz: Optional[tzinfo] = None) -> bool:
    return to_local_date(value, tz).weekday() < 5


def local_date_key(value: DateLike, tz: Optional[tzinfo] = None) -> str:
    """Render a date as ``YYYY-MM-DD`` in local time."""
    d = to_local_date(value, tz)
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_date_key(key: str) -> date:
    """Parse a ``YYYY-MM-DD`` key, ignoring any trailing time part."""
    return date.fromisoformat(key.split("T")[0])


def week_window(anchor: DateLike, tz: Optional[tzinfo] = None) -> list[date]:
    """Get the Monday to Friday dates of the ISO week containing ``anchor``."""
    d = to_local_date(anchor, tz)
    monday = d - timedelta(days=d.weekday())
    return [monday + timedelta(days=i) for i in range(5)]


def iso_week_number(anchor: DateLike, tz: Optional[tzinfo] = None) -> int:
    return to_local_date(anchor, tz).isocalendar()[1]


def time_ranges_overlap(start1: time, end1: time, start2: time, end2: time) -> bool:
    """Half-open interval overlap test.

    Windows that only share an endpoint (09:00-10:00 and 10:00-11:00) do
    not overlap.
    """
    return start1 < end2 and start2 < end1


def windows_conflict(a: Optional[TimeWindow], b: Optional[TimeWindow]) -> bool:
    """Check two optional windows for a clash; None stands for the whole day."""
    if a is None or b is None:
        return True
    return a.overlaps(b)


def closures_for_date(closures: list[SchoolClosure], d: date) -> list[SchoolClosure]:
    """Get every closure whose range contains the date, in list order."""
    return [c for c in closures if c.covers(d)]


def closure_for_date(
    closures: list[SchoolClosure],
    date_key: Union[str, date],
) -> Optional[SchoolClosure]:
    """Find the closure that applies to a date.

    When ranges overlap, a full closure (vacation or holiday) wins over a
    half day, then the closure that started earliest, then list order.
    """
    d = parse_date_key(date_key) if isinstance(date_key, str) else date_key
    matches = closures_for_date(closures, d)
    if not matches:
        return None
    ranked = sorted(
        enumerate(matches),
        key=lambda item: (not item[1].is_full_closure, item[1].start_date, item[0]),
    )
    return ranked[0][1]


def is_past(d: date, today: date) -> bool:
    """Check if a date lies strictly before ``today``.

    ``today`` is always passed in rather than read from the clock.
    """
    return d < today
