"""Domain models and business rules for school staffing."""

from schoolstaffing.domain.models import (
    Absence,
    AmbulantSlot,
    ClosureType,
    DayNote,
    GradeLevelSchedule,
    Group,
    GroupSlot,
    LeaveSlot,
    NoSlot,
    Roster,
    SchoolClosure,
    Slot,
    SlotType,
    Staff,
    StaffDateAssignment,
    StaffRole,
    TimeAbsence,
    TimeWindow,
    Unit,
    UnitOverride,
    UnitSlot,
    Weekday,
)
from schoolstaffing.domain.mutations import EntityType, Mutation, MutationAction, new_id
from schoolstaffing.domain.policies import (
    ClosurePolicy,
    DefaultClosurePolicy,
    DefaultLessonWindowPolicy,
    FirstMatchClosurePolicy,
    LessonWindowPolicy,
)

__all__ = [
    # Models
    "Absence",
    "AmbulantSlot",
    "ClosureType",
    "DayNote",
    "GradeLevelSchedule",
    "Group",
    "GroupSlot",
    "LeaveSlot",
    "NoSlot",
    "Roster",
    "SchoolClosure",
    "Slot",
    "SlotType",
    "Staff",
    "StaffDateAssignment",
    "StaffRole",
    "TimeAbsence",
    "TimeWindow",
    "Unit",
    "UnitOverride",
    "UnitSlot",
    "Weekday",
    # Mutations
    "EntityType",
    "Mutation",
    "MutationAction",
    "new_id",
    # Policies
    "ClosurePolicy",
    "DefaultClosurePolicy",
    "DefaultLessonWindowPolicy",
    "FirstMatchClosurePolicy",
    "LessonWindowPolicy",
]
