"""The closed set of mutation intents.

Every change to a roster is expressed as a Mutation: an action on one
entity collection. The store validates and applies them; nothing else
writes to a snapshot.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from schoolstaffing.domain.models import (
    Absence,
    DayNote,
    GradeLevelSchedule,
    Group,
    SchoolClosure,
    Staff,
    StaffDateAssignment,
    TimeAbsence,
    Unit,
    UnitOverride,
)


class EntityType(Enum):
    """Collections of the roster snapshot."""

    GROUP = "group"
    UNIT = "unit"
    STAFF = "staff"
    ABSENCE = "absence"
    TIME_ABSENCE = "time_absence"
    ASSIGNMENT = "assignment"
    UNIT_OVERRIDE = "unit_override"
    DAY_NOTE = "day_note"
    GRADE_LEVEL_SCHEDULES = "grade_level_schedules"
    CLOSURE = "closure"


class MutationAction(Enum):
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"
    UPSERT = "upsert"
    REPLACE_ALL = "replace_all"


ENTITY_CLASSES: dict[EntityType, type] = {
    EntityType.GROUP: Group,
    EntityType.UNIT: Unit,
    EntityType.STAFF: Staff,
    EntityType.ABSENCE: Absence,
    EntityType.TIME_ABSENCE: TimeAbsence,
    EntityType.ASSIGNMENT: StaffDateAssignment,
    EntityType.UNIT_OVERRIDE: UnitOverride,
    EntityType.DAY_NOTE: DayNote,
    EntityType.GRADE_LEVEL_SCHEDULES: GradeLevelSchedule,
    EntityType.CLOSURE: SchoolClosure,
}

COLLECTIONS: dict[EntityType, str] = {
    EntityType.GROUP: "groups",
    EntityType.UNIT: "units",
    EntityType.STAFF: "staff",
    EntityType.ABSENCE: "absences",
    EntityType.TIME_ABSENCE: "time_absences",
    EntityType.ASSIGNMENT: "assignments",
    EntityType.UNIT_OVERRIDE: "unit_overrides",
    EntityType.DAY_NOTE: "day_notes",
    EntityType.GRADE_LEVEL_SCHEDULES: "grade_level_schedules",
    EntityType.CLOSURE: "closures",
}

_CRUD = frozenset({MutationAction.ADD, MutationAction.UPDATE, MutationAction.DELETE})

ALLOWED_ACTIONS: dict[EntityType, frozenset] = {
    EntityType.GROUP: _CRUD,
    EntityType.UNIT: _CRUD,
    EntityType.STAFF: _CRUD,
    EntityType.ABSENCE: _CRUD,
    EntityType.TIME_ABSENCE: _CRUD,
    EntityType.ASSIGNMENT: _CRUD,
    EntityType.CLOSURE: _CRUD,
    # At most one per key, so writes are upserts
    EntityType.UNIT_OVERRIDE: frozenset({MutationAction.UPSERT, MutationAction.DELETE}),
    EntityType.DAY_NOTE: frozenset({MutationAction.UPSERT, MutationAction.DELETE}),
    EntityType.GRADE_LEVEL_SCHEDULES: frozenset({MutationAction.REPLACE_ALL}),
}


def new_id() -> str:
    """Generate a globally unique, opaque entity id."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Mutation:
    """A single change intent.

    Attributes:
        action: What to do.
        entity: Which collection.
        payload: The entity (add/update/upsert) or the list of grade-level
            schedules (replace_all).
        entity_id: Target id for deletes.
    """

    action: MutationAction
    entity: EntityType
    payload: Any = None
    entity_id: Optional[str] = None

    @classmethod
    def add(cls, entity: EntityType, payload: Any) -> "Mutation":
        return cls(MutationAction.ADD, entity, payload=payload, entity_id=payload.id)

    @classmethod
    def update(cls, entity: EntityType, payload: Any) -> "Mutation":
        return cls(MutationAction.UPDATE, entity, payload=payload, entity_id=payload.id)

    @classmethod
    def delete(cls, entity: EntityType, entity_id: str) -> "Mutation":
        return cls(MutationAction.DELETE, entity, entity_id=entity_id)

    @classmethod
    def upsert(cls, entity: EntityType, payload: Any) -> "Mutation":
        return cls(MutationAction.UPSERT, entity, payload=payload, entity_id=payload.id)

    @classmethod
    def set_grade_level_schedules(cls, schedules: list[GradeLevelSchedule]) -> "Mutation":
        return cls(
            MutationAction.REPLACE_ALL,
            EntityType.GRADE_LEVEL_SCHEDULES,
            payload=list(schedules),
        )

    def describe(self) -> str:
        target = f" {self.entity_id}" if self.entity_id else ""
        return f"{self.action.value} {self.entity.value}{target}"
