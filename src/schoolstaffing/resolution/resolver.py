"""Staffing resolver.

This module merges the weekly schedule with every override layer
(absences, time absences, date-specific assignments, unit overrides and
school closures) to derive the effective staffing of a date: who covers
each group and unit, which groups are unmanned or overstaffed, and who
is free to support.

All queries are pure functions of the snapshot and the target date.
"""

from dataclasses import dataclass, field
from datetime import date, tzinfo
from enum import Enum
from typing import Optional

from schoolstaffing.domain.calendar import DateLike, to_local_date, weekday_key_of
from schoolstaffing.domain.models import (
    Absence,
    AmbulantSlot,
    DayNote,
    Group,
    GroupSlot,
    NoSlot,
    Roster,
    SchoolClosure,
    Slot,
    Staff,
    TimeAbsence,
    TimeWindow,
    Unit,
    UnitSlot,
    Weekday,
)
from schoolstaffing.domain.policies import (
    ClosurePolicy,
    DefaultClosurePolicy,
    DefaultLessonWindowPolicy,
    LessonWindowPolicy,
)
from schoolstaffing.resolution.index import RosterIndex

UNGROUPED_LABEL = "Overig"


class GroupStatus(Enum):
    """Aggregate staffing classification of a group on a date."""

    CLOSED = "closed"  # Full school closure
    INACTIVE = "inactive"  # No lessons this weekday
    UNMANNED = "unmanned"
    OVERSTAFFED = "overstaffed"
    PARTIALLY_ABSENT = "partially_absent"  # Manned, but someone is (partly) out
    MANNED = "manned"


@dataclass
class ResolvedStaff:
    """A staff member as resolved into a group or unit for one date.

    Attributes:
        staff: The staff member.
        is_replacement: True if placed by a date-specific assignment rather
            than the weekly schedule.
        replacement_window: Window of the placement; None is the whole day.
        absent: True if the member has a full-day absence that date.
        absence_reason: Reason of the full-day absence, if any.
        time_absences: Partial absences that date (empty when fully absent).
        assignment_id: Id of the placing assignment, for replacements.
    """

    staff: Staff
    is_replacement: bool = False
    replacement_window: Optional[TimeWindow] = None
    absent: bool = False
    absence_reason: Optional[str] = None
    time_absences: list[TimeAbsence] = field(default_factory=list)
    assignment_id: Optional[str] = None

    @property
    def is_whole_day(self) -> bool:
        """False only for replacements limited to a time window."""
        return not (self.is_replacement and self.replacement_window is not None)

    @property
    def has_time_absence(self) -> bool:
        return not self.absent and bool(self.time_absences)


@dataclass
class GroupStaffing:
    """Full staffing picture of one group on one date."""

    group: Group
    staffing_date: date
    active: bool
    entries: list[ResolvedStaff] = field(default_factory=list)
    unmanned: bool = False
    overstaffed: bool = False
    closure: Optional[SchoolClosure] = None

    @property
    def has_absence(self) -> bool:
        return any(e.absent for e in self.entries)

    @property
    def has_time_absence(self) -> bool:
        return any(e.has_time_absence for e in self.entries)

    @property
    def has_replacement(self) -> bool:
        return any(e.is_replacement for e in self.entries)

    @property
    def is_changed(self) -> bool:
        """Check if anything differs from the normal weekly picture."""
        return (
            self.unmanned
            or self.has_absence
            or self.has_time_absence
            or self.has_replacement
            or self.overstaffed
        )

    @property
    def status(self) -> GroupStatus:
        if self.closure is not None and self.closure.is_full_closure:
            return GroupStatus.CLOSED
        if not self.active:
            return GroupStatus.INACTIVE
        if self.unmanned:
            return GroupStatus.UNMANNED
        if self.overstaffed:
            return GroupStatus.OVERSTAFFED
        if self.has_absence or self.has_time_absence:
            return GroupStatus.PARTIALLY_ABSENT
        return GroupStatus.MANNED


@dataclass
class UnitSupport:
    """Available support staff whose effective unit is ``unit``."""

    unit: Unit
    staff: list[Staff] = field(default_factory=list)


@dataclass
class AvailabilityPartition:
    """Available staff split by effective unit, remainder ungrouped."""

    by_unit: list[UnitSupport] = field(default_factory=list)
    ungrouped: list[Staff] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(len(u.staff) for u in self.by_unit) + len(self.ungrouped)

    def is_empty(self) -> bool:
        return self.total == 0


class StaffingResolver:
    """Resolves the effective staffing of groups and units per date.

    The resolver builds its lookup indices once; create a new resolver
    (or let the store do it) after the roster changes.

    Example:
        >>> resolver = StaffingResolver(roster)
        >>> resolver.is_group_unmanned("g4", date(2024, 1, 15))
        False
    """

    def __init__(
        self,
        roster: Roster,
        lesson_policy: Optional[LessonWindowPolicy] = None,
        closure_policy: Optional[ClosurePolicy] = None,
        tz: Optional[tzinfo] = None,
    ):
        self.roster = roster
        self.index = RosterIndex(roster)
        self.lesson_policy = lesson_policy or DefaultLessonWindowPolicy()
        self.closure_policy = closure_policy or DefaultClosurePolicy()
        self.tz = tz

    # -- calendar ---------------------------------------------------------

    def _day(self, d: DateLike) -> tuple[date, Weekday]:
        local = to_local_date(d, self.tz)
        return local, weekday_key_of(local)

    def closure_on(self, d: DateLike) -> Optional[SchoolClosure]:
        """Get the closure that applies to a date, if any."""
        return self.closure_policy.closure_on(
            self.roster.closures, to_local_date(d, self.tz)
        )

    def is_closed(self, d: DateLike) -> bool:
        """Check if a vacation or holiday closes the whole day."""
        closure = self.closure_on(d)
        return closure is not None and closure.is_full_closure

    def day_note(self, d: DateLike) -> Optional[DayNote]:
        return self.index.day_note(to_local_date(d, self.tz))

    def lesson_window(self, group: Group, day: Weekday) -> TimeWindow:
        """Effective lesson window of a group on a weekday."""
        return self.lesson_policy.lesson_window(
            group, day, self.roster.grade_level_schedules
        )

    def breaks(self, group: Group) -> tuple[TimeWindow, TimeWindow]:
        return self.lesson_policy.breaks(group)

    def is_group_active(self, group_id: str, d: DateLike) -> bool:
        group = self.index.group(group_id)
        if group is None:
            return False
        _, day = self._day(d)
        return group.is_active_on(day)

    # -- groups -----------------------------------------------------------

    def _with_absence_info(
        self,
        staff: Staff,
        d: date,
        is_replacement: bool = False,
        window: Optional[TimeWindow] = None,
        assignment_id: Optional[str] = None,
    ) -> ResolvedStaff:
        absence = self.index.absence(staff.id, d)
        return ResolvedStaff(
            staff=staff,
            is_replacement=is_replacement,
            replacement_window=window,
            absent=absence is not None,
            absence_reason=absence.reason if absence is not None else None,
            time_absences=[] if absence is not None else self.index.time_absences_on(staff.id, d),
            assignment_id=assignment_id,
        )

    def resolve_group_staff(self, group_id: str, d: DateLike) -> list[ResolvedStaff]:
        """Get the effective staff of a group on a date.

        Native weekly-schedule assignees come first (roster order), then
        date-specific replacements in assignment order. A replacement whose
        staff member is already native to the group is skipped.

        Returns an empty list on full closure days and for unknown groups.
        """
        local, day = self._day(d)
        if self.index.group(group_id) is None or self.is_closed(local):
            return []

        resolved = []
        native_ids = set()
        for member in self.roster.staff:
            slot = member.slot_on(day)
            if isinstance(slot, GroupSlot) and slot.group_id == group_id:
                native_ids.add(member.id)
                resolved.append(self._with_absence_info(member, local))

        for assignment in self.index.assignments_on(local):
            if assignment.group_id != group_id or assignment.staff_id in native_ids:
                continue
            member = self.index.staff(assignment.staff_id)
            if member is None:
                continue
            resolved.append(
                self._with_absence_info(
                    member,
                    local,
                    is_replacement=True,
                    window=assignment.window,
                    assignment_id=assignment.id,
                )
            )

        return resolved

    def is_group_unmanned(self, group_id: str, d: DateLike) -> bool:
        """Check if an active group has no present staff.

        A partial-time absence never makes a group unmanned on its own.
        """
        if not self.is_group_active(group_id, d) or self.is_closed(d):
            return False
        entries = self.resolve_group_staff(group_id, d)
        return all(e.absent for e in entries)

    def is_group_overstaffed(self, group_id: str, d: DateLike) -> bool:
        """Check if more than one whole-day, present member covers the group.

        Time-limited replacements never count.
        """
        if not self.is_group_active(group_id, d):
            return False
        entries = self.resolve_group_staff(group_id, d)
        return _count_whole_day_present(entries) > 1

    def group_staffing(self, group_id: str, d: DateLike) -> Optional[GroupStaffing]:
        """Get the full staffing picture of a group, or None for unknown ids."""
        group = self.index.group(group_id)
        if group is None:
            return None
        local, day = self._day(d)
        closure = self.closure_on(local)
        active = group.is_active_on(day)
        if not active or (closure is not None and closure.is_full_closure):
            return GroupStaffing(
                group=group, staffing_date=local, active=active, closure=closure
            )

        entries = self.resolve_group_staff(group_id, local)
        return GroupStaffing(
            group=group,
            staffing_date=local,
            active=True,
            entries=entries,
            unmanned=all(e.absent for e in entries),
            overstaffed=_count_whole_day_present(entries) > 1,
            closure=closure,
        )

    # -- units ------------------------------------------------------------

    def effective_unit_id(self, staff: Staff, d: DateLike) -> Optional[str]:
        """Get the unit a staff member supports on a date.

        A unit override for the date wins; otherwise the unit of a weekly
        unit slot; otherwise None.
        """
        local, day = self._day(d)
        override = self.index.unit_override(staff.id, local)
        if override is not None:
            return override.unit_id
        slot = staff.slot_on(day)
        if isinstance(slot, UnitSlot):
            return slot.unit_id
        return None

    def resolve_unit_staff(self, unit_id: str, d: DateLike) -> list[ResolvedStaff]:
        """Get the unit-scheduled staff effectively supporting a unit."""
        local, day = self._day(d)
        if self.is_closed(local):
            return []
        resolved = []
        for member in self.roster.staff:
            if not isinstance(member.slot_on(day), UnitSlot):
                continue
            if self.effective_unit_id(member, local) == unit_id:
                resolved.append(self._with_absence_info(member, local))
        return resolved

    # -- availability -----------------------------------------------------

    def is_support_slot(self, slot: Slot, day: Weekday) -> bool:
        if isinstance(slot, (NoSlot, UnitSlot)):
            return True
        if isinstance(slot, GroupSlot):
            group = self.index.group(slot.group_id)
            # A dangling group reference counts as no slot at all
            return group is None or not group.is_active_on(day)
        return False

    def has_whole_day_assignment(self, staff_id: str, d: DateLike) -> bool:
        local = to_local_date(d, self.tz)
        return any(a.is_whole_day for a in self.index.assignments_for(staff_id, local))

    def available_staff(self, d: DateLike) -> list[Staff]:
        """Get staff free to support on a date.

        Available staff are present, not placed whole-day by an assignment,
        and either unscheduled, unit staff, or scheduled to a group that has
        no lessons that weekday. Leave and ambulant slots never qualify.
        """
        local, day = self._day(d)
        if self.is_closed(local):
            return []
        return [
            member
            for member in self.roster.staff
            if not self.index.is_absent(member.id, local)
            and not self.has_whole_day_assignment(member.id, local)
            and self.is_support_slot(member.slot_on(day), day)
        ]

    def available_staff_by_unit(self, d: DateLike) -> AvailabilityPartition:
        """Partition available staff by effective unit, in roster unit order."""
        local = to_local_date(d, self.tz)
        buckets: dict[str, list[Staff]] = {}
        ungrouped = []
        for member in self.available_staff(local):
            unit_id = self.effective_unit_id(member, local)
            if unit_id is not None and self.index.unit(unit_id) is not None:
                buckets.setdefault(unit_id, []).append(member)
            else:
                ungrouped.append(member)

        by_unit = [
            UnitSupport(unit=unit, staff=buckets[unit.id])
            for unit in self.roster.units
            if unit.id in buckets
        ]
        return AvailabilityPartition(by_unit=by_unit, ungrouped=ungrouped)

    def ambulant_staff(self, d: DateLike) -> list[Staff]:
        """Get present staff with an ambulant slot that weekday."""
        local, day = self._day(d)
        if self.is_closed(local):
            return []
        return [
            member
            for member in self.roster.staff
            if isinstance(member.slot_on(day), AmbulantSlot)
            and not self.index.is_absent(member.id, local)
        ]

    def absent_staff(self, d: DateLike) -> list[tuple[Staff, Absence]]:
        """Get staff with a full-day absence on a date, with the absence."""
        local = to_local_date(d, self.tz)
        result = []
        for member in self.roster.staff:
            absence = self.index.absence(member.id, local)
            if absence is not None:
                result.append((member, absence))
        return result


def _count_whole_day_present(entries: list[ResolvedStaff]) -> int:
    return sum(1 for e in entries if e.is_whole_day and not e.absent)


# Module-level query functions over a snapshot. Each call builds a fresh
# resolver; hold on to a StaffingResolver when issuing many queries.


def resolve_group_staff(roster: Roster, group_id: str, d: DateLike) -> list[ResolvedStaff]:
    return StaffingResolver(roster).resolve_group_staff(group_id, d)


def is_group_unmanned(roster: Roster, group_id: str, d: DateLike) -> bool:
    return StaffingResolver(roster).is_group_unmanned(group_id, d)


def is_group_overstaffed(roster: Roster, group_id: str, d: DateLike) -> bool:
    return StaffingResolver(roster).is_group_overstaffed(group_id, d)


def resolve_unit_staff(roster: Roster, unit_id: str, d: DateLike) -> list[ResolvedStaff]:
    return StaffingResolver(roster).resolve_unit_staff(unit_id, d)


def effective_unit_id(roster: Roster, staff: Staff, d: DateLike) -> Optional[str]:
    return StaffingResolver(roster).effective_unit_id(staff, d)


def available_staff(roster: Roster, d: DateLike) -> list[Staff]:
    return StaffingResolver(roster).available_staff(d)


def ambulant_staff(roster: Roster, d: DateLike) -> list[Staff]:
    return StaffingResolver(roster).ambulant_staff(d)
