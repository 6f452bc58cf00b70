"""Day and week aggregation.

Rolls the per-group resolution up into dashboard statistics and into the
structured week report that feeds the print/export renderers.
"""

import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from schoolstaffing.domain.calendar import (
    DateLike,
    is_past,
    iso_week_number,
    to_local_date,
    week_window,
    weekday_key_of,
)
from schoolstaffing.domain.models import (
    Absence,
    ClosureType,
    DayNote,
    Group,
    Roster,
    SchoolClosure,
    Staff,
    TimeWindow,
    Weekday,
)
from schoolstaffing.resolution.resolver import (
    AvailabilityPartition,
    GroupStaffing,
    StaffingResolver,
)

UNKNOWN_STAFF_NAME = "Onbekend"


def natural_sort_key(name: str) -> list:
    """Sort key that orders "Groep 2" before "Groep 10"."""
    return [
        int(part) if part.isdigit() else part.casefold()
        for part in re.split(r"(\d+)", name)
    ]


def sorted_groups(groups: list[Group]) -> list[Group]:
    return sorted(groups, key=lambda g: natural_sort_key(g.name))


@dataclass
class DayStats:
    """Dashboard counters for one date."""

    unmanned_count: int = 0
    absent_count: int = 0
    closure: Optional[SchoolClosure] = None

    @property
    def is_ok(self) -> bool:
        return self.unmanned_count == 0 and self.absent_count == 0


@dataclass
class DayReport:
    """Structured summary of one date in a week report.

    Attributes:
        report_date: The date.
        weekday: Its school weekday.
        closure: Applicable closure, if any.
        changed_groups: Active groups that differ from the weekly norm,
            in natural name order.
        unit_support: Available support staff grouped by unit.
        ambulant: Present ambulant staff.
        absent: Staff with a full-day absence and their absence record.
        note: Day note, if any.
    """

    report_date: date
    weekday: Weekday
    closure: Optional[SchoolClosure] = None
    changed_groups: list[GroupStaffing] = field(default_factory=list)
    unit_support: AvailabilityPartition = field(default_factory=AvailabilityPartition)
    ambulant: list[Staff] = field(default_factory=list)
    absent: list[tuple[Staff, Absence]] = field(default_factory=list)
    note: Optional[DayNote] = None

    @property
    def is_closed(self) -> bool:
        return self.closure is not None and self.closure.is_full_closure

    @property
    def half_day(self) -> Optional[SchoolClosure]:
        """The half-day closure banner for this date, if any."""
        if self.closure is not None and self.closure.closure_type == ClosureType.HALF_DAY:
            return self.closure
        return None

    @property
    def is_unchanged(self) -> bool:
        return not self.changed_groups and self.unit_support.is_empty()


@dataclass
class WeekReport:
    """Structured summary of one school week."""

    week_number: int
    days: list[DayReport] = field(default_factory=list)

    @property
    def start_date(self) -> date:
        return self.days[0].report_date

    @property
    def end_date(self) -> date:
        return self.days[-1].report_date

    @property
    def is_unchanged(self) -> bool:
        """True when no day has changed groups or support staff."""
        return all(day.is_unchanged for day in self.days)


@dataclass
class AbsenceRecord:
    """One line in the absence overview.

    Attributes:
        kind: "full" for a full-day absence, "partial" for a time absence.
        record_id: Id of the underlying absence.
        staff_id: Absent staff member.
        staff_name: Display name, or "Onbekend" for a dangling id.
        record_date: Date of the absence.
        window: Time window for partial absences.
        reason: Free-text reason.
        is_past: True if the date lies before the supplied ``today``.
    """

    kind: str
    record_id: str
    staff_id: str
    staff_name: str
    record_date: date
    window: Optional[TimeWindow] = None
    reason: str = ""
    is_past: bool = False


class StaffingReporter:
    """Builds day statistics and week reports from a resolver.

    Example:
        >>> reporter = StaffingReporter(StaffingResolver(roster))
        >>> report = reporter.week_report(week_window(date(2024, 1, 17)))
        >>> report.is_unchanged
        True
    """

    def __init__(self, resolver: StaffingResolver):
        self.resolver = resolver

    @property
    def roster(self) -> Roster:
        return self.resolver.roster

    def day_stats(self, d: DateLike) -> DayStats:
        """Count unmanned active groups and absent staff on a date.

        Both counts are zero on full closure days.
        """
        local = to_local_date(d, self.resolver.tz)
        closure = self.resolver.closure_on(local)
        if closure is not None and closure.is_full_closure:
            return DayStats(closure=closure)

        day = weekday_key_of(local)
        unmanned = sum(
            1
            for group in self.roster.groups
            if group.is_active_on(day) and self.resolver.is_group_unmanned(group.id, local)
        )
        absent = len(self.resolver.absent_staff(local))
        return DayStats(unmanned_count=unmanned, absent_count=absent, closure=closure)

    def day_report(self, d: DateLike) -> DayReport:
        """Build the report section for one date."""
        local = to_local_date(d, self.resolver.tz)
        day = weekday_key_of(local)
        closure = self.resolver.closure_on(local)
        note = self.resolver.day_note(local)
        if closure is not None and closure.is_full_closure:
            return DayReport(report_date=local, weekday=day, closure=closure, note=note)

        changed = []
        for group in sorted_groups(self.roster.groups):
            staffing = self.resolver.group_staffing(group.id, local)
            if staffing is not None and staffing.active and staffing.is_changed:
                changed.append(staffing)

        return DayReport(
            report_date=local,
            weekday=day,
            closure=closure,
            changed_groups=changed,
            unit_support=self.resolver.available_staff_by_unit(local),
            ambulant=self.resolver.ambulant_staff(local),
            absent=self.resolver.absent_staff(local),
            note=note,
        )

    def week_report(self, week_dates: list[date]) -> WeekReport:
        """Build the report for a list of school dates (normally Mon-Fri)."""
        if not week_dates:
            raise ValueError("A week report needs at least one date")
        days = [self.day_report(d) for d in week_dates]
        return WeekReport(week_number=iso_week_number(week_dates[0]), days=days)

    def multi_week_report(self, anchor: DateLike, weeks: int = 1) -> list[WeekReport]:
        """Build reports for ``weeks`` consecutive weeks starting at ``anchor``'s week."""
        first_monday = week_window(anchor, self.resolver.tz)[0]
        return [
            self.week_report(week_window(first_monday + timedelta(weeks=i)))
            for i in range(weeks)
        ]

    def absence_overview(self, today: date) -> list[AbsenceRecord]:
        """List every full and partial absence, newest first.

        Args:
            today: Reference date for the past/current classification.
        """
        index = self.resolver.index

        def name_of(staff_id: str) -> str:
            member = index.staff(staff_id)
            return member.name if member is not None else UNKNOWN_STAFF_NAME

        records = [
            AbsenceRecord(
                kind="full",
                record_id=a.id,
                staff_id=a.staff_id,
                staff_name=name_of(a.staff_id),
                record_date=a.absence_date,
                reason=a.reason,
                is_past=is_past(a.absence_date, today),
            )
            for a in self.roster.absences
        ]
        records.extend(
            AbsenceRecord(
                kind="partial",
                record_id=ta.id,
                staff_id=ta.staff_id,
                staff_name=name_of(ta.staff_id),
                record_date=ta.absence_date,
                window=ta.window,
                reason=ta.reason,
                is_past=is_past(ta.absence_date, today),
            )
            for ta in self.roster.time_absences
        )
        return sorted(records, key=lambda r: r.record_date, reverse=True)


def day_stats(roster: Roster, d: DateLike) -> DayStats:
    return StaffingReporter(StaffingResolver(roster)).day_stats(d)


def week_report(roster: Roster, week_dates: list[date]) -> WeekReport:
    return StaffingReporter(StaffingResolver(roster)).week_report(week_dates)
