"""Replacement candidate filtering.

This module decides who can be offered as a replacement for a gap in a
group, either for the whole day or for one time slot. In time-slot mode
the same person may be offered for several non-overlapping gaps on the
same day, in the same or in different groups, while any overlapping or
whole-day clash blocks them.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from schoolstaffing.domain.calendar import DateLike, to_local_date, weekday_key_of, windows_conflict
from schoolstaffing.domain.models import Staff, TimeWindow
from schoolstaffing.resolution.resolver import StaffingResolver


class CandidateExclusion(Enum):
    """Reasons a staff member cannot be offered as a replacement."""

    SCHOOL_CLOSED = "school_closed"
    UNKNOWN_GROUP = "unknown_group"
    ABSENT = "absent"
    NOT_AVAILABLE = "not_available"  # Own active group, leave, or ambulant
    ALREADY_IN_GROUP = "already_in_group"
    CONFLICTING_ASSIGNMENT = "conflicting_assignment"
    OUTSIDE_WORKING_HOURS = "outside_working_hours"
    TIME_ABSENCE_CONFLICT = "time_absence_conflict"


@dataclass
class ReplacementCandidate:
    """A staff member who can cover the requested gap.

    Attributes:
        staff: The candidate.
        unit_id: Effective unit of the candidate that date, if any.
        working_window: The candidate's own scheduled hours; None means
            not time-bounded.
    """

    staff: Staff
    unit_id: Optional[str] = None
    working_window: Optional[TimeWindow] = None


class ReplacementFinder:
    """Finds replacement candidates for a group on a date.

    Example:
        >>> finder = ReplacementFinder(resolver)
        >>> gap = TimeWindow.from_strings("09:00", "10:00")
        >>> [c.staff.name for c in finder.candidates("g4", monday, gap)]
        ['Jan Koopmans']
    """

    def __init__(self, resolver: StaffingResolver):
        self.resolver = resolver

    def explain_exclusion(
        self,
        staff: Staff,
        group_id: str,
        d: DateLike,
        window: Optional[TimeWindow] = None,
    ) -> Optional[CandidateExclusion]:
        """Get the reason a staff member is excluded, or None if eligible.

        Args:
            staff: Staff member to check.
            group_id: Group with the gap.
            d: Date of the gap.
            window: The gap; None asks for a whole-day replacement.
        """
        resolver = self.resolver
        index = resolver.index
        local = to_local_date(d, resolver.tz)
        day = weekday_key_of(local)

        group = index.group(group_id)
        if group is None:
            return CandidateExclusion.UNKNOWN_GROUP
        if resolver.is_closed(local):
            return CandidateExclusion.SCHOOL_CLOSED
        if index.is_absent(staff.id, local):
            return CandidateExclusion.ABSENT

        slot = staff.slot_on(day)
        if not resolver.is_support_slot(slot, day):
            return CandidateExclusion.NOT_AVAILABLE

        # Already covering the target group at a clashing time
        for entry in resolver.resolve_group_staff(group_id, local):
            if entry.staff.id != staff.id or entry.absent:
                continue
            placed = entry.replacement_window if entry.is_replacement else None
            if windows_conflict(window, placed):
                return CandidateExclusion.ALREADY_IN_GROUP

        for assignment in index.assignments_for(staff.id, local):
            if assignment.group_id == group_id:
                continue
            if windows_conflict(window, assignment.window):
                return CandidateExclusion.CONFLICTING_ASSIGNMENT

        span = window or resolver.lesson_window(group, day)
        if slot.window is not None and not slot.window.covers(span):
            return CandidateExclusion.OUTSIDE_WORKING_HOURS

        for ta in index.time_absences_on(staff.id, local):
            if ta.window.overlaps(span):
                return CandidateExclusion.TIME_ABSENCE_CONFLICT

        return None

    def candidates(
        self,
        group_id: str,
        d: DateLike,
        window: Optional[TimeWindow] = None,
    ) -> list[ReplacementCandidate]:
        """Get every eligible replacement for a gap, in roster order.

        Args:
            group_id: Group with the gap.
            d: Date of the gap.
            window: The gap; None asks for a whole-day replacement.

        Returns:
            Eligible candidates.
        """
        local: date = to_local_date(d, self.resolver.tz)
        day = weekday_key_of(local)
        result = []
        for member in self.resolver.roster.staff:
            if self.explain_exclusion(member, group_id, local, window) is not None:
                continue
            result.append(
                ReplacementCandidate(
                    staff=member,
                    unit_id=self.resolver.effective_unit_id(member, local),
                    working_window=member.slot_on(day).window,
                )
            )
        return result
