"""Domain models for the staffing planner.

This module contains all core data structures: staff with their weekly
schedules, classroom groups and units, the school-closure calendar, and
the sparse date-keyed overlays (absences, time absences, date-specific
assignments, unit overrides, day notes) that the resolver merges on top
of the weekly schedule.
"""

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import ClassVar, Optional, Union


class Weekday(Enum):
    """School weekdays. Weekly schedules only cover Monday to Friday."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"

    @property
    def index(self) -> int:
        """Zero-based position in the school week (Monday = 0)."""
        return list(Weekday).index(self)

    @property
    def label(self) -> str:
        """Dutch display label."""
        return DAY_LABELS_NL[self.index]


DAY_LABELS_NL = ["Maandag", "Dinsdag", "Woensdag", "Donderdag", "Vrijdag"]


class StaffRole(Enum):
    """Job-role tag for a staff member."""

    TEACHER = "Leerkracht"
    TEACHING_ASSISTANT = "Onderwijsassistent"
    INTERNAL_SUPERVISOR = "Intern Begeleider"
    MANAGEMENT = "Directie"
    OTHER = "Overig"


class ClosureType(Enum):
    """Kinds of school closure."""

    VACATION = "vacation"
    HOLIDAY = "holiday"
    HALF_DAY = "half_day"


class SlotType(Enum):
    """Tag of a weekly schedule slot."""

    NONE = "none"
    GROUP = "group"
    UNIT = "unit"
    AMBULANT = "ambulant"
    LEAVE = "vrij"


ABSENCE_REASONS = ["Ziek", "Studiedag", "Verlof", "Nascholing", "Vergadering", "Overig"]
TIME_ABSENCE_REASONS = [
    "Bespreking", "Vergadering", "Overleg", "Oudergesprek", "Nascholing", "Overig",
]

GRADE_LEVELS = list(range(1, 9))


def parse_time(value: str) -> time:
    """Parse an ``HH:MM`` (or ``HH:MM:SS``) string into a time."""
    parts = value.strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"Invalid time: {value!r}")
    return time(hour=int(parts[0]), minute=int(parts[1]))


def format_time(t: time) -> str:
    """Format a time as ``HH:MM``."""
    return t.strftime("%H:%M")


@dataclass(frozen=True)
class TimeWindow:
    """A half-open ``[start, end)`` window of local time, minute resolution.

    Attributes:
        start: First minute of the window.
        end: First minute after the window.
    """

    start: time
    end: time

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(
                f"Window start {format_time(self.start)} must be before "
                f"end {format_time(self.end)}"
            )

    @classmethod
    def from_strings(cls, start: str, end: str) -> "TimeWindow":
        """Create a window from two ``HH:MM`` strings."""
        return cls(parse_time(start), parse_time(end))

    @property
    def start_minutes(self) -> int:
        """Minutes from midnight when the window starts."""
        return self.start.hour * 60 + self.start.minute

    @property
    def end_minutes(self) -> int:
        """Minutes from midnight when the window ends."""
        return self.end.hour * 60 + self.end.minute

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def overlaps(self, other: "TimeWindow") -> bool:
        """Check if this window overlaps another (shared endpoints do not count)."""
        return self.start < other.end and other.start < self.end

    def covers(self, other: "TimeWindow") -> bool:
        """Check if this window fully contains another."""
        return self.start <= other.start and self.end >= other.end

    def __str__(self) -> str:
        return f"{format_time(self.start)}-{format_time(self.end)}"


# Weekly schedule slots. Each variant only carries the fields that are
# meaningful for it, so a group slot without a group id cannot exist.


@dataclass(frozen=True)
class NoSlot:
    """Not scheduled that weekday."""

    slot_type: ClassVar[SlotType] = SlotType.NONE
    window: ClassVar[Optional[TimeWindow]] = None


@dataclass(frozen=True)
class GroupSlot:
    """Assigned to a fixed group, all day or within ``window``."""

    group_id: str
    window: Optional[TimeWindow] = None
    slot_type: ClassVar[SlotType] = SlotType.GROUP

    def __post_init__(self):
        if not self.group_id:
            raise ValueError("A group slot requires a group id")


@dataclass(frozen=True)
class UnitSlot:
    """Floating or support staff for a unit, all day or within ``window``."""

    unit_id: str
    window: Optional[TimeWindow] = None
    slot_type: ClassVar[SlotType] = SlotType.UNIT

    def __post_init__(self):
        if not self.unit_id:
            raise ValueError("A unit slot requires a unit id")


@dataclass(frozen=True)
class AmbulantSlot:
    """Itinerant: working, but not tied to a group or unit."""

    window: Optional[TimeWindow] = None
    slot_type: ClassVar[SlotType] = SlotType.AMBULANT


@dataclass(frozen=True)
class LeaveSlot:
    """Structurally free that weekday. Not an absence, simply not rostered."""

    slot_type: ClassVar[SlotType] = SlotType.LEAVE
    window: ClassVar[Optional[TimeWindow]] = None


Slot = Union[NoSlot, GroupSlot, UnitSlot, AmbulantSlot, LeaveSlot]


@dataclass
class Staff:
    """A staff member and their weekly schedule.

    Attributes:
        id: Unique identifier.
        name: Display name.
        role: Job-role tag.
        schedule: Mapping from weekday to exactly one slot. Missing
            weekdays are treated as not scheduled.
    """

    id: str
    name: str
    role: StaffRole = StaffRole.TEACHER
    schedule: dict[Weekday, Slot] = field(default_factory=dict)

    def slot_on(self, day: Weekday) -> Slot:
        """Get the weekly slot for a weekday."""
        return self.schedule.get(day, NoSlot())

    @property
    def first_name(self) -> str:
        return self.name.split(" ")[0] if self.name else ""


@dataclass
class Group:
    """A classroom group.

    Attributes:
        id: Unique identifier.
        name: Display name (e.g., "Groep 4").
        grade_level: Optional grade level 1-8, used for default lesson times.
        unit_id: Optional owning unit.
        days: Per-weekday active flags. None means active every weekday.
        color: Presentation color tag.
        lesson_window: Explicit lesson-time override for every weekday.
        short_break: Informational short break window.
        long_break: Informational long break window.
    """

    id: str
    name: str
    grade_level: Optional[int] = None
    unit_id: Optional[str] = None
    days: Optional[dict[Weekday, bool]] = None
    color: str = "#3b82f6"
    lesson_window: Optional[TimeWindow] = None
    short_break: Optional[TimeWindow] = None
    long_break: Optional[TimeWindow] = None

    def is_active_on(self, day: Weekday) -> bool:
        """Check if the group has lessons on a weekday."""
        if self.days is None:
            return True
        return self.days.get(day, True) is not False


@dataclass
class Unit:
    """A collection of groups sharing floating/support staff."""

    id: str
    name: str
    group_ids: list[str] = field(default_factory=list)


@dataclass
class GradeLevelSchedule:
    """Default lesson window per weekday for one grade level."""

    grade_level: int
    times: dict[Weekday, TimeWindow] = field(default_factory=dict)

    def window_for(self, day: Weekday) -> Optional[TimeWindow]:
        return self.times.get(day)

    @classmethod
    def create_defaults(cls) -> list["GradeLevelSchedule"]:
        """Create the default schedules for grades 1-8.

        Every weekday runs 08:30-14:30 except Wednesday (08:30-12:15);
        grades 5-8 run until 15:00 on full days.
        """
        schedules = []
        for grade in GRADE_LEVELS:
            full_day_end = "15:00" if grade >= 5 else "14:30"
            times = {}
            for day in Weekday:
                end = "12:15" if day == Weekday.WEDNESDAY else full_day_end
                times[day] = TimeWindow.from_strings("08:30", end)
            schedules.append(cls(grade_level=grade, times=times))
        return schedules


@dataclass
class SchoolClosure:
    """A vacation, public holiday, or half day off.

    Attributes:
        id: Unique identifier.
        name: Display name (e.g., "Kerstvakantie").
        closure_type: Vacation, holiday, or half day.
        start_date: First closed date (inclusive).
        end_date: Last closed date (inclusive). Equals start_date for
            holidays and half days.
        free_from: For half days, the time from which school is out.
    """

    id: str
    name: str
    closure_type: ClosureType
    start_date: date
    end_date: date
    free_from: Optional[time] = None

    def covers(self, d: date) -> bool:
        """Check if a date falls inside the closure range."""
        return self.start_date <= d <= self.end_date

    @property
    def is_full_closure(self) -> bool:
        """Vacations and holidays close the school for the whole day."""
        return self.closure_type in (ClosureType.VACATION, ClosureType.HOLIDAY)


@dataclass
class Absence:
    """A full-day absence of a staff member."""

    id: str
    staff_id: str
    absence_date: date
    reason: str = ""


@dataclass
class TimeAbsence:
    """A partial-day absence of an otherwise present staff member."""

    id: str
    staff_id: str
    absence_date: date
    window: TimeWindow
    reason: str = ""


@dataclass
class StaffDateAssignment:
    """An ad-hoc placement of a staff member into a group on one date.

    Attributes:
        id: Unique identifier.
        staff_id: Placed staff member.
        group_id: Target group.
        assignment_date: Date of the placement.
        window: Time window of the placement. None means the whole day.
    """

    id: str
    staff_id: str
    group_id: str
    assignment_date: date
    window: Optional[TimeWindow] = None

    @property
    def is_whole_day(self) -> bool:
        return self.window is None

    def conflicts_with(self, other: "StaffDateAssignment") -> bool:
        """Check if two placements of the same person collide in time."""
        if self.is_whole_day or other.is_whole_day:
            return True
        return self.window.overlaps(other.window)


@dataclass
class UnitOverride:
    """Single-date reassignment of a unit-scheduled staff member."""

    id: str
    staff_id: str
    override_date: date
    unit_id: str


@dataclass
class DayNote:
    """Free-text note attached to a calendar day."""

    id: str
    note_date: date
    text: str


@dataclass
class Roster:
    """In-memory snapshot of every collection the resolver reads.

    The snapshot is loaded once and then mutated only through the store;
    resolver functions never modify it.
    """

    groups: list[Group] = field(default_factory=list)
    units: list[Unit] = field(default_factory=list)
    staff: list[Staff] = field(default_factory=list)
    absences: list[Absence] = field(default_factory=list)
    time_absences: list[TimeAbsence] = field(default_factory=list)
    assignments: list[StaffDateAssignment] = field(default_factory=list)
    unit_overrides: list[UnitOverride] = field(default_factory=list)
    day_notes: list[DayNote] = field(default_factory=list)
    grade_level_schedules: list[GradeLevelSchedule] = field(default_factory=list)
    closures: list[SchoolClosure] = field(default_factory=list)

    def copy(self) -> "Roster":
        """Shallow copy with independent collection lists."""
        return Roster(
            groups=list(self.groups),
            units=list(self.units),
            staff=list(self.staff),
            absences=list(self.absences),
            time_absences=list(self.time_absences),
            assignments=list(self.assignments),
            unit_overrides=list(self.unit_overrides),
            day_notes=list(self.day_notes),
            grade_level_schedules=list(self.grade_level_schedules),
            closures=list(self.closures),
        )
