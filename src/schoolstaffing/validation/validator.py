"""Validation module for the mutation boundary.

Every mutation is checked here before it reaches the in-memory snapshot.
Structural invariants that a dataclass cannot express on its own (id
references, per-date uniqueness, non-overlapping placements) live here and
nowhere else.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional

from schoolstaffing.domain.calendar import weekday_key_of
from schoolstaffing.domain.models import (
    GRADE_LEVELS,
    Absence,
    ClosureType,
    DayNote,
    Group,
    GroupSlot,
    Roster,
    SchoolClosure,
    Staff,
    StaffDateAssignment,
    TimeAbsence,
    Unit,
    UnitOverride,
    UnitSlot,
)
from schoolstaffing.domain.mutations import (
    ALLOWED_ACTIONS,
    COLLECTIONS,
    ENTITY_CLASSES,
    EntityType,
    Mutation,
    MutationAction,
)


class ValidationErrorType(Enum):
    """Types of validation errors."""

    UNSUPPORTED_ACTION = "unsupported_action"
    WRONG_PAYLOAD_TYPE = "wrong_payload_type"
    MISSING_ID = "missing_id"
    DUPLICATE_ID = "duplicate_id"
    UNKNOWN_ENTITY = "unknown_entity"
    EMPTY_NAME = "empty_name"
    INVALID_GRADE_LEVEL = "invalid_grade_level"
    DANGLING_REFERENCE = "dangling_reference"
    WEEKEND_DATE = "weekend_date"
    DUPLICATE_ABSENCE = "duplicate_absence"
    ASSIGNMENT_CONFLICT = "assignment_conflict"
    NOT_UNIT_STAFF = "not_unit_staff"
    INVALID_DATE_RANGE = "invalid_date_range"
    MISSING_FREE_FROM = "missing_free_from"
    DUPLICATE_GRADE_LEVEL = "duplicate_grade_level"
    EMPTY_NOTE = "empty_note"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    message: str
    entity_id: Optional[str] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.entity_id:
            parts.append(f"{self.entity_id}:")
        parts.append(self.message)
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validating a mutation or a snapshot."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)


def _is_weekend(d: date) -> bool:
    return d.weekday() >= 5


class RosterValidator:
    """Validates mutations against the snapshot they would be applied to.

    Example:
        >>> validator = RosterValidator()
        >>> result = validator.validate_mutation(roster, Mutation.add(EntityType.GROUP, group))
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def validate_mutation(self, roster: Roster, mutation: Mutation) -> ValidationResult:
        """Validate one mutation.

        Args:
            roster: Snapshot the mutation would be applied to.
            mutation: The change intent.

        Returns:
            ValidationResult with is_valid flag and any errors.
        """
        result = ValidationResult(is_valid=True)

        if mutation.action not in ALLOWED_ACTIONS[mutation.entity]:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.UNSUPPORTED_ACTION,
                    message=(
                        f"Action {mutation.action.value} is not supported "
                        f"for {mutation.entity.value}"
                    ),
                )
            )
            return result

        if mutation.action == MutationAction.REPLACE_ALL:
            self._validate_grade_schedules(mutation.payload, result)
            return result

        existing = getattr(roster, COLLECTIONS[mutation.entity])

        if mutation.action == MutationAction.DELETE:
            if not any(item.id == mutation.entity_id for item in existing):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.UNKNOWN_ENTITY,
                        message=f"No {mutation.entity.value} with this id",
                        entity_id=mutation.entity_id,
                    )
                )
            return result

        payload = mutation.payload
        expected = ENTITY_CLASSES[mutation.entity]
        if not isinstance(payload, expected):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.WRONG_PAYLOAD_TYPE,
                    message=(
                        f"Expected {expected.__name__}, got {type(payload).__name__}"
                    ),
                )
            )
            return result

        if not payload.id:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.MISSING_ID,
                    message=f"A {mutation.entity.value} needs an id",
                )
            )
            return result

        ids = {item.id for item in existing}
        if mutation.action == MutationAction.ADD and payload.id in ids:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.DUPLICATE_ID,
                    message=f"A {mutation.entity.value} with this id already exists",
                    entity_id=payload.id,
                )
            )
        if mutation.action == MutationAction.UPDATE and payload.id not in ids:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.UNKNOWN_ENTITY,
                    message=f"No {mutation.entity.value} with this id",
                    entity_id=payload.id,
                )
            )

        checks = {
            EntityType.GROUP: self._validate_group,
            EntityType.UNIT: self._validate_unit,
            EntityType.STAFF: self._validate_staff,
            EntityType.ABSENCE: self._validate_absence,
            EntityType.TIME_ABSENCE: self._validate_time_absence,
            EntityType.ASSIGNMENT: self._validate_assignment,
            EntityType.UNIT_OVERRIDE: self._validate_unit_override,
            EntityType.DAY_NOTE: self._validate_day_note,
            EntityType.CLOSURE: self._validate_closure,
        }
        checks[mutation.entity](roster, payload, result)
        return result

    def validate_roster(self, roster: Roster) -> ValidationResult:
        """Check a whole snapshot for integrity gaps.

        Dangling references are tolerated by the resolver, so they are
        reported as warnings. Conflicting placements are errors.
        """
        result = ValidationResult(is_valid=True)
        group_ids = {g.id for g in roster.groups}
        unit_ids = {u.id for u in roster.units}
        staff_ids = {s.id for s in roster.staff}

        for collection in COLLECTIONS.values():
            if collection == "grade_level_schedules":
                continue
            seen: set[str] = set()
            for item in getattr(roster, collection):
                if item.id in seen:
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.DUPLICATE_ID,
                            message=f"Duplicate id in {collection}",
                            entity_id=item.id,
                        )
                    )
                seen.add(item.id)

        for group in roster.groups:
            if group.unit_id and group.unit_id not in unit_ids:
                result.add_warning(f"Group {group.name} references unknown unit {group.unit_id}")
        for unit in roster.units:
            for gid in unit.group_ids:
                if gid not in group_ids:
                    result.add_warning(f"Unit {unit.name} lists unknown group {gid}")
        for member in roster.staff:
            for day, slot in member.schedule.items():
                if isinstance(slot, GroupSlot) and slot.group_id not in group_ids:
                    result.add_warning(
                        f"{member.name} is scheduled on {day.value} in unknown group {slot.group_id}"
                    )
                if isinstance(slot, UnitSlot) and slot.unit_id not in unit_ids:
                    result.add_warning(
                        f"{member.name} is scheduled on {day.value} in unknown unit {slot.unit_id}"
                    )
        for record in [*roster.absences, *roster.time_absences, *roster.unit_overrides]:
            if record.staff_id not in staff_ids:
                result.add_warning(f"Record {record.id} references unknown staff {record.staff_id}")

        seen_assignments: list[StaffDateAssignment] = []
        for assignment in roster.assignments:
            if assignment.staff_id not in staff_ids:
                result.add_warning(
                    f"Assignment {assignment.id} references unknown staff {assignment.staff_id}"
                )
            if assignment.group_id not in group_ids:
                result.add_warning(
                    f"Assignment {assignment.id} references unknown group {assignment.group_id}"
                )
            for other in seen_assignments:
                if (
                    other.staff_id == assignment.staff_id
                    and other.assignment_date == assignment.assignment_date
                    and other.conflicts_with(assignment)
                ):
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.ASSIGNMENT_CONFLICT,
                            message=f"Overlaps assignment {other.id}",
                            entity_id=assignment.id,
                        )
                    )
            seen_assignments.append(assignment)

        return result

    def _require_staff(self, roster: Roster, staff_id: str, result: ValidationResult) -> Optional[Staff]:
        for member in roster.staff:
            if member.id == staff_id:
                return member
        result.add_error(
            ValidationError(
                error_type=ValidationErrorType.DANGLING_REFERENCE,
                message=f"Unknown staff id {staff_id}",
                details={"staff_id": staff_id},
            )
        )
        return None

    def _check_weekday(self, d: date, entity_id: str, result: ValidationResult) -> None:
        if _is_weekend(d):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.WEEKEND_DATE,
                    message=f"{d.isoformat()} is not a school weekday",
                    entity_id=entity_id,
                )
            )

    def _validate_group(self, roster: Roster, group: Group, result: ValidationResult) -> None:
        if not group.name.strip():
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.EMPTY_NAME,
                    message="Group name is empty",
                    entity_id=group.id,
                )
            )
        if group.grade_level is not None and group.grade_level not in GRADE_LEVELS:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_GRADE_LEVEL,
                    message=f"Grade level {group.grade_level} is outside 1-8",
                    entity_id=group.id,
                )
            )
        if group.unit_id and not any(u.id == group.unit_id for u in roster.units):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.DANGLING_REFERENCE,
                    message=f"Unknown unit id {group.unit_id}",
                    entity_id=group.id,
                )
            )

    def _validate_unit(self, roster: Roster, unit: Unit, result: ValidationResult) -> None:
        if not unit.name.strip():
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.EMPTY_NAME,
                    message="Unit name is empty",
                    entity_id=unit.id,
                )
            )
        known = {g.id for g in roster.groups}
        for gid in unit.group_ids:
            if gid not in known:
                result.add_warning(f"Unit {unit.name} lists unknown group {gid}")

    def _validate_staff(self, roster: Roster, member: Staff, result: ValidationResult) -> None:
        if not member.name.strip():
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.EMPTY_NAME,
                    message="Staff name is empty",
                    entity_id=member.id,
                )
            )
        group_ids = {g.id for g in roster.groups}
        unit_ids = {u.id for u in roster.units}
        for day, slot in member.schedule.items():
            if isinstance(slot, GroupSlot) and slot.group_id not in group_ids:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.DANGLING_REFERENCE,
                        message=f"Slot on {day.value} references unknown group {slot.group_id}",
                        entity_id=member.id,
                    )
                )
            elif isinstance(slot, UnitSlot) and slot.unit_id not in unit_ids:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.DANGLING_REFERENCE,
                        message=f"Slot on {day.value} references unknown unit {slot.unit_id}",
                        entity_id=member.id,
                    )
                )

    def _validate_absence(self, roster: Roster, absence: Absence, result: ValidationResult) -> None:
        self._require_staff(roster, absence.staff_id, result)
        if _is_weekend(absence.absence_date):
            result.add_warning(f"Absence {absence.id} falls on a weekend")
        for other in roster.absences:
            if (
                other.id != absence.id
                and other.staff_id == absence.staff_id
                and other.absence_date == absence.absence_date
            ):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.DUPLICATE_ABSENCE,
                        message=f"Already absent on {absence.absence_date.isoformat()}",
                        entity_id=absence.id,
                        details={"existing_id": other.id},
                    )
                )

    def _validate_time_absence(
        self, roster: Roster, absence: TimeAbsence, result: ValidationResult
    ) -> None:
        self._require_staff(roster, absence.staff_id, result)
        if _is_weekend(absence.absence_date):
            result.add_warning(f"Time absence {absence.id} falls on a weekend")
        same_day = [
            other
            for other in roster.time_absences
            if other.id != absence.id
            and other.staff_id == absence.staff_id
            and other.absence_date == absence.absence_date
        ]
        for other in same_day:
            if other.window.overlaps(absence.window):
                result.add_warning(
                    f"Time absence {absence.id} overlaps {other.id} ({other.window})"
                )
        if any(
            a.staff_id == absence.staff_id and a.absence_date == absence.absence_date
            for a in roster.absences
        ):
            result.add_warning(
                f"Time absence {absence.id} falls on a day with a full-day absence"
            )

    def _validate_assignment(
        self, roster: Roster, assignment: StaffDateAssignment, result: ValidationResult
    ) -> None:
        self._require_staff(roster, assignment.staff_id, result)
        if not any(g.id == assignment.group_id for g in roster.groups):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.DANGLING_REFERENCE,
                    message=f"Unknown group id {assignment.group_id}",
                    entity_id=assignment.id,
                )
            )
        self._check_weekday(assignment.assignment_date, assignment.id, result)

        for other in roster.assignments:
            if (
                other.id == assignment.id
                or other.staff_id != assignment.staff_id
                or other.assignment_date != assignment.assignment_date
            ):
                continue
            if other.conflicts_with(assignment):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.ASSIGNMENT_CONFLICT,
                        message=(
                            f"Staff {assignment.staff_id} is already placed in "
                            f"group {other.group_id} at a clashing time"
                        ),
                        entity_id=assignment.id,
                        details={"existing_id": other.id},
                    )
                )

    def _validate_unit_override(
        self, roster: Roster, override: UnitOverride, result: ValidationResult
    ) -> None:
        member = self._require_staff(roster, override.staff_id, result)
        if not any(u.id == override.unit_id for u in roster.units):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.DANGLING_REFERENCE,
                    message=f"Unknown unit id {override.unit_id}",
                    entity_id=override.id,
                )
            )
        if _is_weekend(override.override_date):
            self._check_weekday(override.override_date, override.id, result)
            return
        if member is not None:
            slot = member.slot_on(weekday_key_of(override.override_date))
            if not isinstance(slot, UnitSlot):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.NOT_UNIT_STAFF,
                        message=(
                            f"{member.name} is not scheduled in a unit on "
                            f"{override.override_date.isoformat()}"
                        ),
                        entity_id=override.id,
                    )
                )

    def _validate_day_note(self, roster: Roster, note: DayNote, result: ValidationResult) -> None:
        if not note.text.strip():
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.EMPTY_NOTE,
                    message="A day note needs text; delete the note instead",
                    entity_id=note.id,
                )
            )

    def _validate_closure(
        self, roster: Roster, closure: SchoolClosure, result: ValidationResult
    ) -> None:
        if not closure.name.strip():
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.EMPTY_NAME,
                    message="Closure name is empty",
                    entity_id=closure.id,
                )
            )
        if closure.end_date < closure.start_date:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_DATE_RANGE,
                    message="End date lies before start date",
                    entity_id=closure.id,
                )
            )
        if closure.closure_type != ClosureType.VACATION and closure.end_date != closure.start_date:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_DATE_RANGE,
                    message=f"A {closure.closure_type.value} closure covers a single day",
                    entity_id=closure.id,
                )
            )
        if closure.closure_type == ClosureType.HALF_DAY and closure.free_from is None:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.MISSING_FREE_FROM,
                    message="A half day needs the time school is out",
                    entity_id=closure.id,
                )
            )
        for other in roster.closures:
            if (
                other.id != closure.id
                and other.start_date <= closure.end_date
                and closure.start_date <= other.end_date
            ):
                result.add_warning(f"Closure {closure.name} overlaps {other.name}")

    def _validate_grade_schedules(self, schedules: Any, result: ValidationResult) -> None:
        seen: set[int] = set()
        for schedule in schedules:
            if schedule.grade_level not in GRADE_LEVELS:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.INVALID_GRADE_LEVEL,
                        message=f"Grade level {schedule.grade_level} is outside 1-8",
                    )
                )
            if schedule.grade_level in seen:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.DUPLICATE_GRADE_LEVEL,
                        message=f"Grade level {schedule.grade_level} appears twice",
                    )
                )
            seen.add(schedule.grade_level)
