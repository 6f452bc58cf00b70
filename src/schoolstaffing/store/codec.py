"""JSON snapshot codec.

Converts between roster dataclasses and plain dicts with camelCase keys,
the shape used by the local cache and by roster input files. Dates are
``YYYY-MM-DD`` strings built from local calendar fields; times are
``HH:MM`` strings.
"""

from datetime import date
from typing import Any, Callable, Optional

from schoolstaffing.domain.calendar import local_date_key, parse_date_key
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
    format_time,
    parse_time,
)
from schoolstaffing.domain.mutations import COLLECTIONS, EntityType, Mutation, MutationAction
from schoolstaffing.errors import RosterFormatError

DEFAULT_FREE_FROM = "12:00"


def _window_to_dict(window: Optional[TimeWindow]) -> dict:
    if window is None:
        return {"startTime": None, "endTime": None}
    return {"startTime": format_time(window.start), "endTime": format_time(window.end)}


def _window_from_dict(data: dict, what: str) -> Optional[TimeWindow]:
    start, end = data.get("startTime"), data.get("endTime")
    if not start and not end:
        return None
    if not start or not end:
        raise RosterFormatError(f"{what}: startTime and endTime must be set together")
    try:
        return TimeWindow.from_strings(start, end)
    except ValueError as e:
        raise RosterFormatError(f"{what}: {e}") from e


def _date(value: Any, what: str) -> date:
    try:
        return parse_date_key(value)
    except (AttributeError, TypeError, ValueError) as e:
        raise RosterFormatError(f"{what}: invalid date {value!r}") from e


def slot_to_dict(slot: Slot) -> dict:
    data: dict[str, Any] = {"type": slot.slot_type.value}
    if isinstance(slot, GroupSlot):
        data["groupId"] = slot.group_id
    elif isinstance(slot, UnitSlot):
        data["unitId"] = slot.unit_id
    if slot.window is not None:
        data.update(_window_to_dict(slot.window))
    return data


def slot_from_dict(data: dict) -> Slot:
    """Decode a weekly slot record.

    Raises:
        RosterFormatError: If the type is unknown or a group/unit slot has
            no id.
    """
    try:
        slot_type = SlotType(data.get("type") or "none")
    except ValueError as e:
        raise RosterFormatError(f"Unknown slot type {data.get('type')!r}") from e

    window = _window_from_dict(data, "slot")
    try:
        if slot_type == SlotType.GROUP:
            return GroupSlot(group_id=data.get("groupId") or "", window=window)
        if slot_type == SlotType.UNIT:
            return UnitSlot(unit_id=data.get("unitId") or "", window=window)
    except ValueError as e:
        raise RosterFormatError(str(e)) from e
    if slot_type == SlotType.AMBULANT:
        return AmbulantSlot(window=window)
    if slot_type == SlotType.LEAVE:
        return LeaveSlot()
    return NoSlot()


def staff_to_dict(member: Staff) -> dict:
    return {
        "id": member.id,
        "name": member.name,
        "role": member.role.value,
        "schedule": {day.value: slot_to_dict(member.slot_on(day)) for day in Weekday},
    }


def staff_from_dict(data: dict) -> Staff:
    schedule = {
        Weekday(key): slot_from_dict(value)
        for key, value in (data.get("schedule") or {}).items()
    }
    try:
        role = StaffRole(data.get("role") or StaffRole.TEACHER.value)
    except ValueError as e:
        raise RosterFormatError(f"Unknown staff role {data.get('role')!r}") from e
    return Staff(id=data["id"], name=data.get("name", ""), role=role, schedule=schedule)


def group_to_dict(group: Group) -> dict:
    data = {
        "id": group.id,
        "name": group.name,
        "gradeLevel": group.grade_level,
        "unitId": group.unit_id,
        "color": group.color,
        "days": (
            {day.value: group.is_active_on(day) for day in Weekday}
            if group.days is not None
            else None
        ),
    }
    data.update(_window_to_dict(group.lesson_window))
    data["shortBreak"] = _break_to_dict(group.short_break)
    data["longBreak"] = _break_to_dict(group.long_break)
    return data


def _break_to_dict(window: Optional[TimeWindow]) -> Optional[dict]:
    if window is None:
        return None
    return {"start": format_time(window.start), "end": format_time(window.end)}


def _break_from_dict(data: Optional[dict]) -> Optional[TimeWindow]:
    if not data or not data.get("start") or not data.get("end"):
        return None
    return TimeWindow.from_strings(data["start"], data["end"])


def group_from_dict(data: dict) -> Group:
    days = data.get("days")
    return Group(
        id=data["id"],
        name=data.get("name", ""),
        grade_level=data.get("gradeLevel"),
        unit_id=data.get("unitId") or None,
        days={Weekday(k): bool(v) for k, v in days.items()} if days else None,
        color=data.get("color") or "#3b82f6",
        lesson_window=_window_from_dict(data, f"group {data['id']}"),
        short_break=_break_from_dict(data.get("shortBreak")),
        long_break=_break_from_dict(data.get("longBreak")),
    )


def unit_to_dict(unit: Unit) -> dict:
    return {"id": unit.id, "name": unit.name, "groupIds": list(unit.group_ids)}


def unit_from_dict(data: dict) -> Unit:
    return Unit(id=data["id"], name=data.get("name", ""), group_ids=list(data.get("groupIds") or []))


def absence_to_dict(absence: Absence) -> dict:
    return {
        "id": absence.id,
        "staffId": absence.staff_id,
        "date": local_date_key(absence.absence_date),
        "reason": absence.reason,
    }


def absence_from_dict(data: dict) -> Absence:
    return Absence(
        id=data["id"],
        staff_id=data["staffId"],
        absence_date=_date(data.get("date"), f"absence {data['id']}"),
        reason=data.get("reason") or "",
    )


def time_absence_to_dict(absence: TimeAbsence) -> dict:
    data = {
        "id": absence.id,
        "staffId": absence.staff_id,
        "date": local_date_key(absence.absence_date),
        "reason": absence.reason,
    }
    data.update(_window_to_dict(absence.window))
    return data


def time_absence_from_dict(data: dict) -> TimeAbsence:
    what = f"time absence {data['id']}"
    window = _window_from_dict(data, what)
    if window is None:
        raise RosterFormatError(f"{what}: a time absence needs startTime and endTime")
    return TimeAbsence(
        id=data["id"],
        staff_id=data["staffId"],
        absence_date=_date(data.get("date"), what),
        window=window,
        reason=data.get("reason") or "",
    )


def assignment_to_dict(assignment: StaffDateAssignment) -> dict:
    data = {
        "id": assignment.id,
        "staffId": assignment.staff_id,
        "groupId": assignment.group_id,
        "date": local_date_key(assignment.assignment_date),
    }
    data.update(_window_to_dict(assignment.window))
    return data


def assignment_from_dict(data: dict) -> StaffDateAssignment:
    what = f"assignment {data['id']}"
    return StaffDateAssignment(
        id=data["id"],
        staff_id=data["staffId"],
        group_id=data["groupId"],
        assignment_date=_date(data.get("date"), what),
        window=_window_from_dict(data, what),
    )


def unit_override_to_dict(override: UnitOverride) -> dict:
    return {
        "id": override.id,
        "staffId": override.staff_id,
        "date": local_date_key(override.override_date),
        "unitId": override.unit_id,
    }


def unit_override_from_dict(data: dict) -> UnitOverride:
    return UnitOverride(
        id=data["id"],
        staff_id=data["staffId"],
        override_date=_date(data.get("date"), f"unit override {data['id']}"),
        unit_id=data["unitId"],
    )


def day_note_to_dict(note: DayNote) -> dict:
    return {"id": note.id, "date": local_date_key(note.note_date), "text": note.text}


def day_note_from_dict(data: dict) -> DayNote:
    return DayNote(
        id=data["id"],
        note_date=_date(data.get("date"), f"day note {data['id']}"),
        text=data.get("text") or "",
    )


def grade_schedule_to_dict(schedule: GradeLevelSchedule) -> dict:
    return {
        "gradeLevel": schedule.grade_level,
        "schedule": {
            day.value: _window_to_dict(window) for day, window in schedule.times.items()
        },
    }


def grade_schedule_from_dict(data: dict) -> GradeLevelSchedule:
    what = f"grade level {data.get('gradeLevel')}"
    times = {}
    for key, value in (data.get("schedule") or {}).items():
        window = _window_from_dict(value, what)
        if window is not None:
            times[Weekday(key)] = window
    return GradeLevelSchedule(grade_level=int(data["gradeLevel"]), times=times)


def closure_to_dict(closure: SchoolClosure) -> dict:
    return {
        "id": closure.id,
        "name": closure.name,
        "type": closure.closure_type.value,
        "startDate": local_date_key(closure.start_date),
        "endDate": local_date_key(closure.end_date),
        "freeFromTime": format_time(closure.free_from) if closure.free_from else None,
    }


def closure_from_dict(data: dict) -> SchoolClosure:
    what = f"closure {data['id']}"
    try:
        closure_type = ClosureType(data.get("type"))
    except ValueError as e:
        raise RosterFormatError(f"{what}: unknown type {data.get('type')!r}") from e
    start = _date(data.get("startDate"), what)
    end = _date(data.get("endDate"), what) if data.get("endDate") else start
    free_from = None
    if closure_type == ClosureType.HALF_DAY:
        free_from = parse_time(data.get("freeFromTime") or DEFAULT_FREE_FROM)
    return SchoolClosure(
        id=data["id"],
        name=data.get("name", ""),
        closure_type=closure_type,
        start_date=start,
        end_date=end,
        free_from=free_from,
    )


_CODECS: dict[EntityType, tuple[str, Callable, Callable]] = {
    EntityType.GROUP: ("groups", group_to_dict, group_from_dict),
    EntityType.UNIT: ("units", unit_to_dict, unit_from_dict),
    EntityType.STAFF: ("staff", staff_to_dict, staff_from_dict),
    EntityType.ABSENCE: ("absences", absence_to_dict, absence_from_dict),
    EntityType.TIME_ABSENCE: ("timeAbsences", time_absence_to_dict, time_absence_from_dict),
    EntityType.ASSIGNMENT: ("staffDateAssignments", assignment_to_dict, assignment_from_dict),
    EntityType.UNIT_OVERRIDE: ("unitOverrides", unit_override_to_dict, unit_override_from_dict),
    EntityType.DAY_NOTE: ("dayNotes", day_note_to_dict, day_note_from_dict),
    EntityType.GRADE_LEVEL_SCHEDULES: (
        "gradeLevelSchedules", grade_schedule_to_dict, grade_schedule_from_dict,
    ),
    EntityType.CLOSURE: ("schoolClosures", closure_to_dict, closure_from_dict),
}


def roster_to_dict(roster: Roster) -> dict:
    """Encode a whole snapshot."""
    return {
        key: [encode(item) for item in getattr(roster, COLLECTIONS[entity])]
        for entity, (key, encode, _) in _CODECS.items()
    }


def roster_from_dict(data: dict) -> Roster:
    """Decode a whole snapshot. Missing collections decode as empty.

    Raises:
        RosterFormatError: If any record is malformed.
    """
    roster = Roster()
    for entity, (key, _, decode) in _CODECS.items():
        records = data.get(key) or []
        try:
            items = [decode(record) for record in records]
        except KeyError as e:
            raise RosterFormatError(f"{key}: missing field {e.args[0]!r}") from e
        except ValueError as e:
            if isinstance(e, RosterFormatError):
                raise
            raise RosterFormatError(f"{key}: {e}") from e
        setattr(roster, COLLECTIONS[entity], items)
    return roster


def mutation_to_dict(mutation: Mutation) -> dict:
    """Encode a mutation as the payload of a durable write."""
    _, encode, _ = _CODECS[mutation.entity]
    data: dict[str, Any] = {
        "action": mutation.action.value,
        "entity": mutation.entity.value,
        "id": mutation.entity_id,
    }
    if mutation.action == MutationAction.REPLACE_ALL:
        data["payload"] = [encode(item) for item in mutation.payload]
    elif mutation.payload is not None:
        data["payload"] = encode(mutation.payload)
    return data
