"""Tests for mutation and snapshot validation."""

from datetime import date, time

import pytest

from schoolstaffing.cli import create_sample_roster
from schoolstaffing.domain.models import (
    Absence,
    ClosureType,
    DayNote,
    GradeLevelSchedule,
    Group,
    GroupSlot,
    SchoolClosure,
    Staff,
    StaffDateAssignment,
    TimeAbsence,
    TimeWindow,
    Unit,
    UnitOverride,
    UnitSlot,
    Weekday,
)
from schoolstaffing.domain.mutations import EntityType, Mutation, MutationAction
from schoolstaffing.validation.validator import (
    RosterValidator,
    ValidationErrorType,
)

MONDAY = date(2024, 1, 15)
SATURDAY = date(2024, 1, 20)


def error_types(result):
    return [e.error_type for e in result.errors]


class TestRosterValidator:
    """Tests for RosterValidator.validate_mutation."""

    @pytest.fixture
    def validator(self):
        return RosterValidator()

    @pytest.fixture
    def roster(self):
        return create_sample_roster()

    def test_valid_absence(self, validator, roster):
        result = validator.validate_mutation(
            roster, Mutation.add(EntityType.ABSENCE, Absence("a1", "s5", MONDAY, "Ziek"))
        )
        assert result.is_valid
        assert result.errors == []

    def test_unsupported_action(self, validator, roster):
        mutation = Mutation.add(EntityType.DAY_NOTE, DayNote("n1", MONDAY, "Hallo"))
        result = validator.validate_mutation(roster, mutation)
        assert error_types(result) == [ValidationErrorType.UNSUPPORTED_ACTION]

    def test_wrong_payload_type(self, validator, roster):
        mutation = Mutation(MutationAction.ADD, EntityType.GROUP, payload=Unit("x", "Unit"))
        result = validator.validate_mutation(roster, mutation)
        assert error_types(result) == [ValidationErrorType.WRONG_PAYLOAD_TYPE]

    def test_missing_id(self, validator, roster):
        result = validator.validate_mutation(
            roster, Mutation.add(EntityType.GROUP, Group(id="", name="Nieuw"))
        )
        assert error_types(result) == [ValidationErrorType.MISSING_ID]

    def test_duplicate_id_on_add(self, validator, roster):
        result = validator.validate_mutation(
            roster, Mutation.add(EntityType.GROUP, Group(id="g1", name="Groep 1"))
        )
        assert ValidationErrorType.DUPLICATE_ID in error_types(result)

    def test_update_unknown(self, validator, roster):
        result = validator.validate_mutation(
            roster, Mutation.update(EntityType.GROUP, Group(id="g99", name="Groep 99"))
        )
        assert error_types(result) == [ValidationErrorType.UNKNOWN_ENTITY]

    def test_delete_unknown(self, validator, roster):
        result = validator.validate_mutation(roster, Mutation.delete(EntityType.STAFF, "nobody"))
        assert error_types(result) == [ValidationErrorType.UNKNOWN_ENTITY]
        assert validator.validate_mutation(roster, Mutation.delete(EntityType.STAFF, "s1")).is_valid

    def test_error_string(self, validator, roster):
        result = validator.validate_mutation(roster, Mutation.delete(EntityType.STAFF, "nobody"))
        assert str(result.errors[0]).startswith("[unknown_entity] nobody:")


class TestEntityChecks:
    """Per-entity invariants."""

    @pytest.fixture
    def validator(self):
        return RosterValidator()

    @pytest.fixture
    def roster(self):
        return create_sample_roster()

    def check(self, validator, roster, mutation):
        return validator.validate_mutation(roster, mutation)

    def test_group_grade_and_unit(self, validator, roster):
        result = self.check(
            validator, roster,
            Mutation.add(EntityType.GROUP, Group(id="g9", name="Groep 9", grade_level=9, unit_id="u9")),
        )
        assert error_types(result) == [
            ValidationErrorType.INVALID_GRADE_LEVEL,
            ValidationErrorType.DANGLING_REFERENCE,
        ]

    def test_empty_names(self, validator, roster):
        assert error_types(
            self.check(validator, roster, Mutation.add(EntityType.GROUP, Group(id="gx", name="  ")))
        ) == [ValidationErrorType.EMPTY_NAME]
        assert error_types(
            self.check(validator, roster, Mutation.add(EntityType.STAFF, Staff(id="sx", name="")))
        ) == [ValidationErrorType.EMPTY_NAME]

    def test_unit_with_unknown_group_warns(self, validator, roster):
        result = self.check(
            validator, roster, Mutation.add(EntityType.UNIT, Unit("u3", "Middenbouw", ["g42"]))
        )
        assert result.is_valid
        assert len(result.warnings) == 1

    def test_staff_slot_references(self, validator, roster):
        member = Staff(
            id="s12",
            name="Lotte",
            schedule={Weekday.MONDAY: GroupSlot("g42"), Weekday.TUESDAY: UnitSlot("u42")},
        )
        result = self.check(validator, roster, Mutation.add(EntityType.STAFF, member))
        assert error_types(result) == [ValidationErrorType.DANGLING_REFERENCE] * 2

    def test_duplicate_absence(self, validator, roster):
        roster.absences.append(Absence("a1", "s5", MONDAY, "Ziek"))
        result = self.check(
            validator, roster, Mutation.add(EntityType.ABSENCE, Absence("a2", "s5", MONDAY, "Verlof"))
        )
        assert error_types(result) == [ValidationErrorType.DUPLICATE_ABSENCE]
        # Editing the existing record is not a duplicate of itself
        result = self.check(
            validator, roster, Mutation.update(EntityType.ABSENCE, Absence("a1", "s5", MONDAY, "Verlof"))
        )
        assert result.is_valid

    def test_absence_unknown_staff(self, validator, roster):
        result = self.check(
            validator, roster, Mutation.add(EntityType.ABSENCE, Absence("a1", "ghost", MONDAY))
        )
        assert error_types(result) == [ValidationErrorType.DANGLING_REFERENCE]

    def test_weekend_absence_warns(self, validator, roster):
        result = self.check(
            validator, roster, Mutation.add(EntityType.ABSENCE, Absence("a1", "s5", SATURDAY))
        )
        assert result.is_valid
        assert result.warnings

    def test_weekend_time_absence_warns(self, validator, roster):
        absence = TimeAbsence("t1", "s8", SATURDAY, TimeWindow.from_strings("09:00", "10:00"))
        result = self.check(validator, roster, Mutation.add(EntityType.TIME_ABSENCE, absence))
        assert result.is_valid
        assert result.warnings == ["Time absence t1 falls on a weekend"]

    def test_time_absence_overlap_warns(self, validator, roster):
        roster.time_absences.append(
            TimeAbsence("t1", "s8", MONDAY, TimeWindow.from_strings("13:00", "14:00"))
        )
        result = self.check(
            validator, roster,
            Mutation.add(
                EntityType.TIME_ABSENCE,
                TimeAbsence("t2", "s8", MONDAY, TimeWindow.from_strings("13:30", "15:00")),
            ),
        )
        assert result.is_valid
        assert len(result.warnings) == 1

    def test_assignment_conflicts(self, validator, roster):
        roster.assignments.append(
            StaffDateAssignment("r1", "s10", "g1", MONDAY, TimeWindow.from_strings("09:00", "10:00"))
        )
        overlapping = StaffDateAssignment(
            "r2", "s10", "g2", MONDAY, TimeWindow.from_strings("09:30", "10:30")
        )
        later = StaffDateAssignment(
            "r3", "s10", "g2", MONDAY, TimeWindow.from_strings("13:00", "14:00")
        )
        whole_day = StaffDateAssignment("r4", "s10", "g3", MONDAY)
        assert error_types(
            self.check(validator, roster, Mutation.add(EntityType.ASSIGNMENT, overlapping))
        ) == [ValidationErrorType.ASSIGNMENT_CONFLICT]
        assert self.check(validator, roster, Mutation.add(EntityType.ASSIGNMENT, later)).is_valid
        assert error_types(
            self.check(validator, roster, Mutation.add(EntityType.ASSIGNMENT, whole_day))
        ) == [ValidationErrorType.ASSIGNMENT_CONFLICT]

    def test_assignment_update_does_not_conflict_with_itself(self, validator, roster):
        roster.assignments.append(StaffDateAssignment("r1", "s10", "g1", MONDAY))
        moved = StaffDateAssignment("r1", "s10", "g2", MONDAY)
        assert self.check(validator, roster, Mutation.update(EntityType.ASSIGNMENT, moved)).is_valid

    def test_assignment_on_weekend(self, validator, roster):
        result = self.check(
            validator, roster,
            Mutation.add(EntityType.ASSIGNMENT, StaffDateAssignment("r1", "s10", "g1", SATURDAY)),
        )
        assert error_types(result) == [ValidationErrorType.WEEKEND_DATE]

    def test_unit_override_requires_unit_slot(self, validator, roster):
        ok = UnitOverride("o1", "s10", MONDAY, "u2")
        assert self.check(validator, roster, Mutation.upsert(EntityType.UNIT_OVERRIDE, ok)).is_valid

        not_unit = UnitOverride("o2", "s1", MONDAY, "u2")
        result = self.check(validator, roster, Mutation.upsert(EntityType.UNIT_OVERRIDE, not_unit))
        assert error_types(result) == [ValidationErrorType.NOT_UNIT_STAFF]

        # Karen has no slot on Wednesdays
        wednesday = UnitOverride("o3", "s11", date(2024, 1, 17), "u1")
        result = self.check(validator, roster, Mutation.upsert(EntityType.UNIT_OVERRIDE, wednesday))
        assert error_types(result) == [ValidationErrorType.NOT_UNIT_STAFF]

    def test_unit_override_weekend(self, validator, roster):
        override = UnitOverride("o1", "s10", SATURDAY, "u2")
        result = self.check(validator, roster, Mutation.upsert(EntityType.UNIT_OVERRIDE, override))
        assert error_types(result) == [ValidationErrorType.WEEKEND_DATE]

    def test_empty_day_note(self, validator, roster):
        result = self.check(
            validator, roster, Mutation.upsert(EntityType.DAY_NOTE, DayNote("n1", MONDAY, " "))
        )
        assert error_types(result) == [ValidationErrorType.EMPTY_NOTE]

    def test_closure_rules(self, validator, roster):
        backwards = SchoolClosure(
            "c1", "Vakantie", ClosureType.VACATION, date(2024, 2, 16), date(2024, 2, 9)
        )
        long_holiday = SchoolClosure(
            "c2", "Pasen", ClosureType.HOLIDAY, date(2024, 4, 1), date(2024, 4, 2)
        )
        half_day = SchoolClosure(
            "c3", "Studiemiddag", ClosureType.HALF_DAY, MONDAY, MONDAY
        )
        assert error_types(
            self.check(validator, roster, Mutation.add(EntityType.CLOSURE, backwards))
        ) == [ValidationErrorType.INVALID_DATE_RANGE]
        assert error_types(
            self.check(validator, roster, Mutation.add(EntityType.CLOSURE, long_holiday))
        ) == [ValidationErrorType.INVALID_DATE_RANGE]
        assert error_types(
            self.check(validator, roster, Mutation.add(EntityType.CLOSURE, half_day))
        ) == [ValidationErrorType.MISSING_FREE_FROM]

    def test_overlapping_closure_warns(self, validator, roster):
        roster.closures.append(
            SchoolClosure("c1", "Voorjaarsvakantie", ClosureType.VACATION, date(2024, 2, 12), date(2024, 2, 16))
        )
        half_day = SchoolClosure(
            "c2", "Studiemiddag", ClosureType.HALF_DAY, date(2024, 2, 12), date(2024, 2, 12), free_from=time(12)
        )
        result = self.check(validator, roster, Mutation.add(EntityType.CLOSURE, half_day))
        assert result.is_valid
        assert result.warnings == ["Closure Studiemiddag overlaps Voorjaarsvakantie"]

    def test_grade_schedules(self, validator, roster):
        schedules = GradeLevelSchedule.create_defaults()
        assert self.check(validator, roster, Mutation.set_grade_level_schedules(schedules)).is_valid

        broken = schedules + [GradeLevelSchedule(grade_level=3), GradeLevelSchedule(grade_level=0)]
        result = self.check(validator, roster, Mutation.set_grade_level_schedules(broken))
        assert error_types(result) == [
            ValidationErrorType.DUPLICATE_GRADE_LEVEL,
            ValidationErrorType.INVALID_GRADE_LEVEL,
        ]


class TestSnapshotValidation:
    """Tests for RosterValidator.validate_roster."""

    def test_sample_roster_is_clean(self):
        result = RosterValidator().validate_roster(create_sample_roster())
        assert result.is_valid
        assert result.warnings == []

    def test_dangling_references_warn(self):
        roster = create_sample_roster()
        roster.staff[0].schedule[Weekday.MONDAY] = GroupSlot("g42")
        roster.absences.append(Absence("a1", "ghost", MONDAY))
        result = RosterValidator().validate_roster(roster)
        assert result.is_valid
        assert len(result.warnings) == 2

    def test_duplicate_ids_and_conflicts_are_errors(self):
        roster = create_sample_roster()
        roster.groups.append(Group(id="g1", name="Kopie"))
        roster.assignments.extend(
            [
                StaffDateAssignment("r1", "s10", "g1", MONDAY),
                StaffDateAssignment("r2", "s10", "g2", MONDAY, TimeWindow.from_strings("09:00", "10:00")),
            ]
        )
        result = RosterValidator().validate_roster(roster)
        assert error_types(result) == [
            ValidationErrorType.DUPLICATE_ID,
            ValidationErrorType.ASSIGNMENT_CONFLICT,
        ]
