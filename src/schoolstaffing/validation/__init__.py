"""Validation of mutations and roster snapshots."""

from schoolstaffing.validation.validator import (
    RosterValidator,
    ValidationError,
    ValidationErrorType,
    ValidationResult,
)

__all__ = [
    "RosterValidator",
    "ValidationError",
    "ValidationErrorType",
    "ValidationResult",
]
