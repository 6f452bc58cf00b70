"""Derived lookup indices over a roster snapshot.

The resolver runs once per visible calendar cell, so the sparse overlays
are indexed by date and staff id once per snapshot instead of being
re-scanned for every query.
"""

from collections import defaultdict
from datetime import date
from typing import Optional

from schoolstaffing.domain.models import (
    Absence,
    DayNote,
    GradeLevelSchedule,
    Group,
    Roster,
    Staff,
    StaffDateAssignment,
    TimeAbsence,
    Unit,
    UnitOverride,
)


class RosterIndex:
    """Read-only indices built from a Roster.

    Lookups use find-or-None semantics throughout: a dangling id yields
    None or an empty list, never an exception.
    """

    def __init__(self, roster: Roster):
        self.roster = roster

        self.groups_by_id: dict[str, Group] = {g.id: g for g in roster.groups}
        self.units_by_id: dict[str, Unit] = {u.id: u for u in roster.units}
        self.staff_by_id: dict[str, Staff] = {s.id: s for s in roster.staff}
        self.grade_schedules_by_level: dict[int, GradeLevelSchedule] = {
            s.grade_level: s for s in roster.grade_level_schedules
        }

        # First record wins for (staff, date) keys; duplicates are undefined
        self.absences: dict[tuple[str, date], Absence] = {}
        for absence in roster.absences:
            self.absences.setdefault((absence.staff_id, absence.absence_date), absence)

        self.time_absences: dict[tuple[str, date], list[TimeAbsence]] = defaultdict(list)
        for ta in roster.time_absences:
            self.time_absences[(ta.staff_id, ta.absence_date)].append(ta)
        for entries in self.time_absences.values():
            entries.sort(key=lambda ta: ta.window.start)

        self.assignments_by_date: dict[date, list[StaffDateAssignment]] = defaultdict(list)
        self.assignments_by_staff_date: dict[
            tuple[str, date], list[StaffDateAssignment]
        ] = defaultdict(list)
        for assignment in roster.assignments:
            self.assignments_by_date[assignment.assignment_date].append(assignment)
            key = (assignment.staff_id, assignment.assignment_date)
            self.assignments_by_staff_date[key].append(assignment)

        # Last override wins, matching upsert semantics on write
        self.unit_overrides: dict[tuple[str, date], UnitOverride] = {}
        for override in roster.unit_overrides:
            self.unit_overrides[(override.staff_id, override.override_date)] = override

        self.day_notes: dict[date, DayNote] = {}
        for note in roster.day_notes:
            self.day_notes[note.note_date] = note

    def group(self, group_id: Optional[str]) -> Optional[Group]:
        if group_id is None:
            return None
        return self.groups_by_id.get(group_id)

    def unit(self, unit_id: Optional[str]) -> Optional[Unit]:
        if unit_id is None:
            return None
        return self.units_by_id.get(unit_id)

    def staff(self, staff_id: str) -> Optional[Staff]:
        return self.staff_by_id.get(staff_id)

    def absence(self, staff_id: str, d: date) -> Optional[Absence]:
        return self.absences.get((staff_id, d))

    def is_absent(self, staff_id: str, d: date) -> bool:
        return (staff_id, d) in self.absences

    def time_absences_on(self, staff_id: str, d: date) -> list[TimeAbsence]:
        return list(self.time_absences.get((staff_id, d), []))

    def assignments_on(self, d: date) -> list[StaffDateAssignment]:
        return list(self.assignments_by_date.get(d, []))

    def assignments_for(self, staff_id: str, d: date) -> list[StaffDateAssignment]:
        return list(self.assignments_by_staff_date.get((staff_id, d), []))

    def unit_override(self, staff_id: str, d: date) -> Optional[UnitOverride]:
        return self.unit_overrides.get((staff_id, d))

    def day_note(self, d: date) -> Optional[DayNote]:
        return self.day_notes.get(d)
