"""Roster store: mutations, write-behind sync, local cache and JSON codec."""

from schoolstaffing.domain.mutations import EntityType, Mutation, MutationAction, new_id
from schoolstaffing.store.cache import LocalCache
from schoolstaffing.store.codec import mutation_to_dict, roster_from_dict, roster_to_dict
from schoolstaffing.store.mutations import apply_mutation
from schoolstaffing.store.store import RosterStore
from schoolstaffing.store.sync import (
    InMemoryBackend,
    NullBackend,
    StorageBackend,
    SyncNotification,
    SyncQueue,
)

__all__ = [
    # Store
    "RosterStore",
    "Mutation",
    "MutationAction",
    "EntityType",
    "apply_mutation",
    "new_id",
    # Sync
    "StorageBackend",
    "NullBackend",
    "InMemoryBackend",
    "SyncQueue",
    "SyncNotification",
    # Persistence
    "LocalCache",
    "roster_to_dict",
    "roster_from_dict",
    "mutation_to_dict",
]
