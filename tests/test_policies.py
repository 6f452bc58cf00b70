"""Tests for policy implementations."""

from datetime import date, time

from schoolstaffing.domain.models import (
    ClosureType,
    GradeLevelSchedule,
    Group,
    SchoolClosure,
    TimeWindow,
    Weekday,
)
from schoolstaffing.domain.policies import (
    FALLBACK_LESSON_WINDOW,
    FALLBACK_LONG_BREAK,
    FALLBACK_SHORT_BREAK,
    DefaultClosurePolicy,
    DefaultLessonWindowPolicy,
    FirstMatchClosurePolicy,
)


class TestDefaultLessonWindowPolicy:
    """Tests for DefaultLessonWindowPolicy."""

    def test_group_override_wins(self):
        policy = DefaultLessonWindowPolicy()
        group = Group(
            id="g1",
            name="Groep 1",
            grade_level=1,
            lesson_window=TimeWindow.from_strings("08:45", "14:00"),
        )
        window = policy.lesson_window(group, Weekday.WEDNESDAY, GradeLevelSchedule.create_defaults())
        assert str(window) == "08:45-14:00"

    def test_grade_level_schedule(self):
        policy = DefaultLessonWindowPolicy()
        group = Group(id="g7", name="Groep 7", grade_level=7)
        schedules = GradeLevelSchedule.create_defaults()
        assert str(policy.lesson_window(group, Weekday.MONDAY, schedules)) == "08:30-15:00"
        assert str(policy.lesson_window(group, Weekday.WEDNESDAY, schedules)) == "08:30-12:15"

    def test_fallback_without_grade(self):
        policy = DefaultLessonWindowPolicy()
        group = Group(id="gx", name="Kleuters")
        assert policy.lesson_window(group, Weekday.MONDAY, []) == FALLBACK_LESSON_WINDOW

    def test_fallback_when_grade_has_no_schedule(self):
        policy = DefaultLessonWindowPolicy()
        group = Group(id="g3", name="Groep 3", grade_level=3)
        assert policy.lesson_window(group, Weekday.MONDAY, []) == FALLBACK_LESSON_WINDOW

    def test_custom_fallback(self):
        fallback = TimeWindow.from_strings("08:15", "14:15")
        policy = DefaultLessonWindowPolicy(fallback)
        group = Group(id="gx", name="Kleuters")
        assert policy.lesson_window(group, Weekday.FRIDAY, []) == fallback

    def test_break_fallbacks(self):
        group = Group(id="gx", name="Kleuters")
        assert DefaultLessonWindowPolicy().breaks(group) == (
            FALLBACK_SHORT_BREAK,
            FALLBACK_LONG_BREAK,
        )
        assert str(FALLBACK_LONG_BREAK) == "12:00-12:45"

    def test_group_breaks_win(self):
        short = TimeWindow.from_strings("10:00", "10:15")
        group = Group(id="g7", name="Groep 7", short_break=short)
        assert DefaultLessonWindowPolicy().breaks(group) == (short, FALLBACK_LONG_BREAK)


class TestClosurePolicies:
    """Tests for closure precedence policies."""

    def _closures(self):
        half_day = SchoolClosure(
            id="c1",
            name="Studiemiddag",
            closure_type=ClosureType.HALF_DAY,
            start_date=date(2024, 2, 9),
            end_date=date(2024, 2, 9),
            free_from=time(12),
        )
        vacation = SchoolClosure(
            id="c2",
            name="Voorjaarsvakantie",
            closure_type=ClosureType.VACATION,
            start_date=date(2024, 2, 9),
            end_date=date(2024, 2, 16),
        )
        return [half_day, vacation]

    def test_default_prefers_full_closure(self):
        closure = DefaultClosurePolicy().closure_on(self._closures(), date(2024, 2, 9))
        assert closure.id == "c2"

    def test_first_match_uses_list_order(self):
        closure = FirstMatchClosurePolicy().closure_on(self._closures(), date(2024, 2, 9))
        assert closure.id == "c1"

    def test_no_match(self):
        assert DefaultClosurePolicy().closure_on(self._closures(), date(2024, 3, 1)) is None
        assert FirstMatchClosurePolicy().closure_on(self._closures(), date(2024, 3, 1)) is None
