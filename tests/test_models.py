"""Tests for domain models."""

from datetime import date, time

import pytest

from schoolstaffing.domain.models import (
    ABSENCE_REASONS,
    TIME_ABSENCE_REASONS,
    GradeLevelSchedule,
    Group,
    GroupSlot,
    LeaveSlot,
    NoSlot,
    SlotType,
    Staff,
    StaffDateAssignment,
    TimeWindow,
    UnitSlot,
    Weekday,
    format_time,
    parse_time,
)


class TestTimeWindow:
    """Tests for TimeWindow."""

    def test_from_strings(self):
        window = TimeWindow.from_strings("08:30", "14:30")
        assert window.start == time(8, 30)
        assert window.end == time(14, 30)
        assert window.duration_minutes == 360
        assert str(window) == "08:30-14:30"

    def test_start_must_precede_end(self):
        with pytest.raises(ValueError):
            TimeWindow.from_strings("10:00", "10:00")
        with pytest.raises(ValueError):
            TimeWindow.from_strings("11:00", "10:00")

    def test_covers(self):
        day = TimeWindow.from_strings("08:30", "14:30")
        assert day.covers(TimeWindow.from_strings("09:00", "10:00"))
        assert day.covers(day)
        assert not day.covers(TimeWindow.from_strings("14:00", "15:00"))

    def test_parse_and_format(self):
        assert parse_time("9:05") == time(9, 5)
        assert parse_time("09:05:00") == time(9, 5)
        assert format_time(time(9, 5)) == "09:05"
        with pytest.raises(ValueError):
            parse_time("0905")


class TestSlots:
    """Weekly slots are a closed sum type."""

    def test_group_slot_requires_id(self):
        with pytest.raises(ValueError):
            GroupSlot(group_id="")

    def test_unit_slot_requires_id(self):
        with pytest.raises(ValueError):
            UnitSlot(unit_id="")

    def test_slot_types(self):
        assert NoSlot().slot_type == SlotType.NONE
        assert LeaveSlot().slot_type.value == "vrij"
        assert GroupSlot("g1").window is None

    def test_missing_weekday_is_no_slot(self):
        member = Staff(id="s1", name="Anja de Vries", schedule={Weekday.MONDAY: GroupSlot("g1")})
        assert isinstance(member.slot_on(Weekday.TUESDAY), NoSlot)
        assert member.first_name == "Anja"


class TestGroup:
    def test_active_by_default(self):
        group = Group(id="g1", name="Groep 1")
        assert all(group.is_active_on(day) for day in Weekday)

    def test_inactive_day(self):
        group = Group(id="g1", name="Groep 1", days={Weekday.WEDNESDAY: False})
        assert not group.is_active_on(Weekday.WEDNESDAY)
        assert group.is_active_on(Weekday.MONDAY)


class TestGradeLevelDefaults:
    def test_eight_grades(self):
        schedules = GradeLevelSchedule.create_defaults()
        assert [s.grade_level for s in schedules] == list(range(1, 9))

    def test_wednesday_short_day(self):
        grade_3 = GradeLevelSchedule.create_defaults()[2]
        assert str(grade_3.window_for(Weekday.WEDNESDAY)) == "08:30-12:15"
        assert str(grade_3.window_for(Weekday.MONDAY)) == "08:30-14:30"

    def test_upper_grades_end_later(self):
        grade_6 = GradeLevelSchedule.create_defaults()[5]
        assert str(grade_6.window_for(Weekday.THURSDAY)) == "08:30-15:00"
        assert str(grade_6.window_for(Weekday.WEDNESDAY)) == "08:30-12:15"


class TestReasonCategories:
    def test_absence_reasons_end_with_overig(self):
        assert ABSENCE_REASONS[0] == "Ziek"
        assert ABSENCE_REASONS[-1] == "Overig"

    def test_time_absence_reasons(self):
        assert "Oudergesprek" in TIME_ABSENCE_REASONS
        assert "Ziek" not in TIME_ABSENCE_REASONS
        assert len(set(TIME_ABSENCE_REASONS)) == len(TIME_ABSENCE_REASONS)


class TestAssignmentConflicts:
    def _assignment(self, window=None):
        return StaffDateAssignment(
            id="a", staff_id="s1", group_id="g1", assignment_date=date(2024, 1, 15), window=window
        )

    def test_whole_day_conflicts(self):
        partial = self._assignment(TimeWindow.from_strings("09:00", "10:00"))
        assert self._assignment().conflicts_with(partial)
        assert partial.conflicts_with(self._assignment())

    def test_adjacent_windows_do_not_conflict(self):
        a = self._assignment(TimeWindow.from_strings("09:00", "10:00"))
        b = self._assignment(TimeWindow.from_strings("10:00", "11:00"))
        assert not a.conflicts_with(b)
