"""Exception hierarchy for the staffing planner."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from schoolstaffing.validation.validator import ValidationResult


class SchoolStaffingError(Exception):
    """Base class for all planner errors."""


class WeekendDateError(SchoolStaffingError, ValueError):
    """Raised when a Saturday or Sunday reaches a weekday-keyed lookup.

    Weekly schedules only cover Monday through Friday, so callers must
    keep weekend dates out of the resolver.
    """


class UnknownEntityError(SchoolStaffingError, KeyError):
    """Raised when an update or delete targets an id that does not exist."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"Unknown {entity} id: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class MutationRejected(SchoolStaffingError):
    """Raised when a mutation fails validation at the store boundary."""

    def __init__(self, result: "ValidationResult"):
        messages = "; ".join(str(e) for e in result.errors)
        super().__init__(f"Mutation rejected: {messages}")
        self.result = result


class RosterFormatError(SchoolStaffingError, ValueError):
    """Raised when a serialized roster record cannot be decoded."""
