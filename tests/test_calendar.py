"""Tests for time and calendar utilities."""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from schoolstaffing.domain.calendar import (
    closure_for_date,
    closures_for_date,
    is_past,
    is_school_day,
    iso_week_number,
    local_date_key,
    parse_date_key,
    time_ranges_overlap,
    to_local_date,
    week_window,
    weekday_key_of,
    windows_conflict,
)
from schoolstaffing.domain.models import ClosureType, SchoolClosure, TimeWindow, Weekday
from schoolstaffing.errors import WeekendDateError

MONDAY = date(2024, 1, 15)


class TestWeekdays:
    """Tests for weekday mapping."""

    def test_weekdays_map_to_keys(self):
        keys = [weekday_key_of(MONDAY + timedelta(days=i)) for i in range(5)]
        assert keys == [
            Weekday.MONDAY,
            Weekday.TUESDAY,
            Weekday.WEDNESDAY,
            Weekday.THURSDAY,
            Weekday.FRIDAY,
        ]

    def test_weekend_raises(self):
        with pytest.raises(WeekendDateError):
            weekday_key_of(date(2024, 1, 20))
        with pytest.raises(WeekendDateError):
            weekday_key_of(date(2024, 1, 21))

    def test_weekend_error_is_value_error(self):
        with pytest.raises(ValueError):
            weekday_key_of(date(2024, 1, 21))

    def test_is_school_day(self):
        assert is_school_day(MONDAY)
        assert not is_school_day(date(2024, 1, 20))

    def test_labels(self):
        assert Weekday.MONDAY.label == "Maandag"
        assert Weekday.FRIDAY.index == 4


class TestLocalDates:
    """Date keys must be built from local calendar fields."""

    def test_date_key_format(self):
        assert local_date_key(date(2024, 3, 5)) == "2024-03-05"

    def test_naive_datetime_is_local(self):
        assert local_date_key(datetime(2024, 1, 15, 0, 30)) == "2024-01-15"

    def test_aware_datetime_converted_to_zone(self):
        # 23:30 UTC is already the next day in UTC+2
        instant = datetime(2024, 1, 14, 23, 30, tzinfo=timezone.utc)
        plus_two = timezone(timedelta(hours=2))
        assert to_local_date(instant, plus_two) == MONDAY
        assert local_date_key(instant, plus_two) == "2024-01-15"

    def test_local_midnight_ahead_of_utc_keeps_day(self):
        plus_one = timezone(timedelta(hours=1))
        midnight = datetime(2024, 1, 15, 0, 0, tzinfo=plus_one)
        assert local_date_key(midnight, plus_one) == "2024-01-15"

    def test_parse_date_key(self):
        assert parse_date_key("2024-01-15") == MONDAY
        assert parse_date_key("2024-01-15T00:00:00") == MONDAY


class TestWeekWindow:
    """Tests for week_window."""

    def test_monday_to_friday(self):
        days = week_window(date(2024, 1, 17))
        assert days[0] == MONDAY
        assert days[-1] == date(2024, 1, 19)
        assert len(days) == 5

    def test_weekend_anchor_uses_its_own_week(self):
        assert week_window(date(2024, 1, 21))[0] == MONDAY

    def test_iso_week_number(self):
        assert iso_week_number(MONDAY) == 3


class TestOverlap:
    """Tests for the half-open overlap predicate."""

    def test_overlapping(self):
        assert time_ranges_overlap(time(9), time(10), time(9, 30), time(11))

    def test_shared_endpoint_does_not_overlap(self):
        assert not time_ranges_overlap(time(9), time(10), time(10), time(11))
        assert not time_ranges_overlap(time(10), time(11), time(9), time(10))

    def test_containment(self):
        assert time_ranges_overlap(time(8), time(15), time(9), time(10))

    @pytest.mark.parametrize(
        "a,b",
        [
            ((time(9), time(10)), (time(9, 30), time(11))),
            ((time(9), time(10)), (time(10), time(11))),
            ((time(8), time(12)), (time(13), time(14))),
            ((time(8), time(15)), (time(9), time(10))),
        ],
    )
    def test_symmetry(self, a, b):
        assert time_ranges_overlap(*a, *b) == time_ranges_overlap(*b, *a)

    def test_whole_day_conflicts_with_anything(self):
        window = TimeWindow.from_strings("09:00", "10:00")
        assert windows_conflict(None, window)
        assert windows_conflict(window, None)
        assert windows_conflict(None, None)

    def test_window_conflict(self):
        a = TimeWindow.from_strings("09:00", "10:00")
        b = TimeWindow.from_strings("10:00", "11:00")
        assert not windows_conflict(a, b)


class TestClosureLookup:
    """Tests for closure lookup and precedence."""

    @pytest.fixture
    def vacation(self):
        return SchoolClosure(
            id="c1",
            name="Kerstvakantie",
            closure_type=ClosureType.VACATION,
            start_date=date(2023, 12, 25),
            end_date=date(2024, 1, 5),
        )

    def test_inclusive_range(self, vacation):
        assert closure_for_date([vacation], date(2023, 12, 25)) is vacation
        assert closure_for_date([vacation], date(2024, 1, 5)) is vacation
        assert closure_for_date([vacation], date(2024, 1, 8)) is None

    def test_accepts_date_key(self, vacation):
        assert closure_for_date([vacation], "2024-01-02") is vacation

    def test_full_closure_beats_half_day(self, vacation):
        half_day = SchoolClosure(
            id="c2",
            name="Kerstviering",
            closure_type=ClosureType.HALF_DAY,
            start_date=date(2024, 1, 2),
            end_date=date(2024, 1, 2),
            free_from=time(12),
        )
        assert closure_for_date([half_day, vacation], date(2024, 1, 2)) is vacation

    def test_earliest_start_wins_between_full_closures(self, vacation):
        holiday = SchoolClosure(
            id="c3",
            name="Nieuwjaarsdag",
            closure_type=ClosureType.HOLIDAY,
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 1),
        )
        assert closure_for_date([holiday, vacation], date(2024, 1, 1)) is vacation

    def test_list_order_breaks_remaining_ties(self):
        first = SchoolClosure("a", "A", ClosureType.HOLIDAY, MONDAY, MONDAY)
        second = SchoolClosure("b", "B", ClosureType.HOLIDAY, MONDAY, MONDAY)
        assert closure_for_date([first, second], MONDAY) is first
        assert closures_for_date([first, second], MONDAY) == [first, second]


class TestIsPast:
    def test_today_is_not_past(self):
        assert not is_past(MONDAY, today=MONDAY)

    def test_yesterday_is_past(self):
        assert is_past(MONDAY - timedelta(days=1), today=MONDAY)
