"""Staffing-resolution engine: resolver, replacement search and reporting."""

from schoolstaffing.resolution.aggregation import (
    AbsenceRecord,
    DayReport,
    DayStats,
    StaffingReporter,
    WeekReport,
    day_stats,
    week_report,
)
from schoolstaffing.resolution.candidates import (
    CandidateExclusion,
    ReplacementCandidate,
    ReplacementFinder,
)
from schoolstaffing.resolution.index import RosterIndex
from schoolstaffing.resolution.resolver import (
    AvailabilityPartition,
    GroupStaffing,
    GroupStatus,
    ResolvedStaff,
    StaffingResolver,
    UnitSupport,
    ambulant_staff,
    available_staff,
    effective_unit_id,
    is_group_overstaffed,
    is_group_unmanned,
    resolve_group_staff,
    resolve_unit_staff,
)

__all__ = [
    # Resolver
    "StaffingResolver",
    "RosterIndex",
    "ResolvedStaff",
    "GroupStaffing",
    "GroupStatus",
    "UnitSupport",
    "AvailabilityPartition",
    "resolve_group_staff",
    "is_group_unmanned",
    "is_group_overstaffed",
    "resolve_unit_staff",
    "effective_unit_id",
    "available_staff",
    "ambulant_staff",
    # Replacements
    "ReplacementFinder",
    "ReplacementCandidate",
    "CandidateExclusion",
    # Reporting
    "StaffingReporter",
    "DayStats",
    "DayReport",
    "WeekReport",
    "AbsenceRecord",
    "day_stats",
    "week_report",
]
