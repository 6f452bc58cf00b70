"""Local application of mutations to a roster snapshot.

Applying a mutation never touches the input snapshot: it returns a new
Roster with fresh collection lists, so resolvers holding the previous
snapshot stay consistent.
"""

from dataclasses import replace
from typing import Any

from schoolstaffing.domain.models import GroupSlot, NoSlot, Roster, Staff
from schoolstaffing.domain.mutations import COLLECTIONS, EntityType, Mutation, MutationAction
from schoolstaffing.errors import UnknownEntityError


def _upsert_key(entity: EntityType, item: Any) -> tuple:
    if entity == EntityType.UNIT_OVERRIDE:
        return (item.staff_id, item.override_date)
    return (item.note_date,)


def apply_mutation(roster: Roster, mutation: Mutation) -> Roster:
    """Apply a mutation and return the resulting snapshot.

    Deletes cascade: removing a group drops it from unit member lists and
    drops assignments targeting it; removing a unit clears the unit of its
    groups; removing a staff member drops their absences, time absences,
    assignments and unit overrides.

    Raises:
        UnknownEntityError: If an update or delete targets a missing id.
    """
    result = roster.copy()
    attr = COLLECTIONS[mutation.entity]
    items = getattr(result, attr)

    if mutation.action == MutationAction.REPLACE_ALL:
        setattr(result, attr, list(mutation.payload))
        return result

    if mutation.action == MutationAction.ADD:
        items.append(mutation.payload)
        return result

    if mutation.action == MutationAction.UPSERT:
        key = _upsert_key(mutation.entity, mutation.payload)
        # Same key or same id is replaced, so an upsert can move a record
        kept = [
            i
            for i in items
            if _upsert_key(mutation.entity, i) != key and i.id != mutation.payload.id
        ]
        kept.append(mutation.payload)
        setattr(result, attr, kept)
        return result

    target_id = mutation.entity_id
    if not any(i.id == target_id for i in items):
        raise UnknownEntityError(mutation.entity.value, target_id)

    if mutation.action == MutationAction.UPDATE:
        setattr(
            result,
            attr,
            [mutation.payload if i.id == target_id else i for i in items],
        )
        return result

    setattr(result, attr, [i for i in items if i.id != target_id])
    _cascade_delete(result, mutation.entity, target_id)
    return result


def _cascade_delete(roster: Roster, entity: EntityType, entity_id: str) -> None:
    if entity == EntityType.GROUP:
        roster.units = [
            replace(u, group_ids=[g for g in u.group_ids if g != entity_id])
            if entity_id in u.group_ids
            else u
            for u in roster.units
        ]
        roster.assignments = [a for a in roster.assignments if a.group_id != entity_id]
        roster.staff = [_drop_group_slots(s, entity_id) for s in roster.staff]
    elif entity == EntityType.UNIT:
        roster.groups = [
            replace(g, unit_id=None) if g.unit_id == entity_id else g
            for g in roster.groups
        ]
    elif entity == EntityType.STAFF:
        roster.absences = [a for a in roster.absences if a.staff_id != entity_id]
        roster.time_absences = [a for a in roster.time_absences if a.staff_id != entity_id]
        roster.assignments = [a for a in roster.assignments if a.staff_id != entity_id]
        roster.unit_overrides = [o for o in roster.unit_overrides if o.staff_id != entity_id]


def _drop_group_slots(staff: Staff, group_id: str) -> Staff:
    """Reset weekly slots that point at a deleted group."""
    if not any(
        isinstance(slot, GroupSlot) and slot.group_id == group_id
        for slot in staff.schedule.values()
    ):
        return staff
    schedule = {
        day: NoSlot() if isinstance(slot, GroupSlot) and slot.group_id == group_id else slot
        for day, slot in staff.schedule.items()
    }
    return replace(staff, schedule=schedule)
