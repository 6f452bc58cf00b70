"""Policy definitions for staffing rules.

Policies hold the configurable parts of the rules (where lesson times
come from, which closure applies when ranges overlap) so they can be
tested independently of the resolver and swapped without touching it.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from schoolstaffing.domain.calendar import closure_for_date, closures_for_date
from schoolstaffing.domain.models import (
    GradeLevelSchedule,
    Group,
    SchoolClosure,
    TimeWindow,
    Weekday,
)

FALLBACK_LESSON_WINDOW = TimeWindow.from_strings("08:30", "14:30")
FALLBACK_SHORT_BREAK = TimeWindow.from_strings("10:15", "10:30")
FALLBACK_LONG_BREAK = TimeWindow.from_strings("12:00", "12:45")


class LessonWindowPolicy(ABC):
    """Abstract base class for deciding a group's lesson times."""

    @abstractmethod
    def lesson_window(
        self,
        group: Group,
        day: Weekday,
        grade_schedules: list[GradeLevelSchedule],
    ) -> TimeWindow:
        """Get the lesson window of a group on a weekday.

        Args:
            group: The group.
            day: Weekday to look up.
            grade_schedules: Configured grade-level schedules.

        Returns:
            The effective lesson window.
        """
        pass

    def breaks(self, group: Group) -> tuple[TimeWindow, TimeWindow]:
        """Get the (short, long) break windows of a group."""
        return (
            group.short_break or FALLBACK_SHORT_BREAK,
            group.long_break or FALLBACK_LONG_BREAK,
        )


class ClosurePolicy(ABC):
    """Abstract base class for picking the closure that applies to a date."""

    @abstractmethod
    def closure_on(
        self, closures: list[SchoolClosure], d: date
    ) -> Optional[SchoolClosure]:
        """Get the applicable closure for a date, if any."""
        pass


class DefaultLessonWindowPolicy(LessonWindowPolicy):
    """Explicit group override, then grade-level schedule, then fallback.

    Args:
        fallback: Window used when neither the group nor its grade level
            defines one.
    """

    def __init__(self, fallback: Optional[TimeWindow] = None):
        self.fallback = fallback or FALLBACK_LESSON_WINDOW

    def lesson_window(
        self,
        group: Group,
        day: Weekday,
        grade_schedules: list[GradeLevelSchedule],
    ) -> TimeWindow:
        if group.lesson_window is not None:
            return group.lesson_window
        if group.grade_level is not None:
            for schedule in grade_schedules:
                if schedule.grade_level == group.grade_level:
                    window = schedule.window_for(day)
                    if window is not None:
                        return window
                    break
        return self.fallback


class DefaultClosurePolicy(ClosurePolicy):
    """Full closures beat half days, then earliest start, then list order."""

    def closure_on(
        self, closures: list[SchoolClosure], d: date
    ) -> Optional[SchoolClosure]:
        return closure_for_date(closures, d)


class FirstMatchClosurePolicy(ClosurePolicy):
    """The first closure in list order that covers the date."""

    def closure_on(
        self, closures: list[SchoolClosure], d: date
    ) -> Optional[SchoolClosure]:
        matches = closures_for_date(closures, d)
        return matches[0] if matches else None
