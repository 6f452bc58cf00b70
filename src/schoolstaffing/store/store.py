"""In-memory roster store with optimistic updates."""

import logging
import threading
from datetime import tzinfo
from typing import Optional

from schoolstaffing.config import PlannerConfig
from schoolstaffing.domain.models import Roster
from schoolstaffing.domain.mutations import Mutation
from schoolstaffing.domain.policies import DefaultLessonWindowPolicy, LessonWindowPolicy
from schoolstaffing.errors import MutationRejected
from schoolstaffing.resolution.resolver import StaffingResolver
from schoolstaffing.store.cache import LocalCache
from schoolstaffing.store.mutations import apply_mutation
from schoolstaffing.store.sync import NullBackend, StorageBackend, SyncNotification, SyncQueue
from schoolstaffing.validation.validator import RosterValidator, ValidationResult

logger = logging.getLogger(__name__)


class RosterStore:
    """Holds the session's snapshot and routes every change through it.

    A dispatched mutation is validated, applied to a new snapshot that
    replaces the current one, and then forwarded to durable storage and the
    local cache in the background. Readers always see the latest local
    snapshot, regardless of whether the durable write has completed.

    Example:
        >>> store = RosterStore(roster, backend=InMemoryBackend(), organization_id="org-1")
        >>> store.dispatch(Mutation.add(EntityType.ABSENCE, absence))
        >>> store.resolver.is_group_unmanned("g4", monday)
        True
    """

    def __init__(
        self,
        roster: Optional[Roster] = None,
        backend: Optional[StorageBackend] = None,
        organization_id: str = "default",
        cache: Optional[LocalCache] = None,
        validator: Optional[RosterValidator] = None,
        notification_ttl: float = 5.0,
        lesson_policy: Optional[LessonWindowPolicy] = None,
        tz: Optional[tzinfo] = None,
    ):
        self._roster = roster or Roster()
        self._lock = threading.Lock()
        self._resolver: Optional[StaffingResolver] = None
        self.lesson_policy = lesson_policy
        self.tz = tz
        self.validator = validator or RosterValidator()
        self.cache = cache
        self.sync = SyncQueue(
            backend or NullBackend(),
            organization_id,
            notification_ttl=notification_ttl,
        )

    @classmethod
    def from_config(
        cls,
        config: PlannerConfig,
        backend: Optional[StorageBackend] = None,
        roster: Optional[Roster] = None,
    ) -> "RosterStore":
        """Create a store from configuration.

        Without an explicit roster the local cache is used as the initial
        snapshot, falling back to an empty roster.
        """
        cache = None
        if config.cache_path:
            cache = LocalCache(config.cache_path, config.cache_debounce_seconds)
            if roster is None:
                roster = cache.load()
                if roster is not None:
                    logger.info("Loaded snapshot from cache %s", config.cache_path)
        return cls(
            roster,
            backend=backend,
            organization_id=config.organization_id,
            cache=cache,
            notification_ttl=config.notification_ttl_seconds,
            lesson_policy=DefaultLessonWindowPolicy(config.fallback_lesson_window),
            tz=config.tzinfo,
        )

    @property
    def roster(self) -> Roster:
        return self._roster

    @property
    def resolver(self) -> StaffingResolver:
        """Resolver over the current snapshot, rebuilt after each change."""
        with self._lock:
            if self._resolver is None:
                self._resolver = StaffingResolver(
                    self._roster, lesson_policy=self.lesson_policy, tz=self.tz
                )
            return self._resolver

    def check(self, mutation: Mutation) -> ValidationResult:
        """Validate a mutation against the current snapshot without applying it."""
        return self.validator.validate_mutation(self._roster, mutation)

    def dispatch(self, mutation: Mutation) -> ValidationResult:
        """Validate and apply a mutation, then schedule its durable write.

        Returns:
            The validation result, which may carry warnings.

        Raises:
            MutationRejected: If validation fails. The snapshot is unchanged.
        """
        with self._lock:
            result = self.validator.validate_mutation(self._roster, mutation)
            if not result.is_valid:
                logger.info("Rejected %s: %d error(s)", mutation.describe(), len(result.errors))
                raise MutationRejected(result)
            self._roster = apply_mutation(self._roster, mutation)
            self._resolver = None
            snapshot = self._roster

        for warning in result.warnings:
            logger.info("%s: %s", mutation.describe(), warning)
        self.sync.enqueue(mutation)
        if self.cache is not None:
            self.cache.save(snapshot)
        return result

    def reload(self, roster: Roster) -> None:
        """Replace the whole snapshot, e.g. after a fresh load from storage."""
        with self._lock:
            self._roster = roster
            self._resolver = None
        if self.cache is not None:
            self.cache.save(roster)

    def notifications(self) -> list[SyncNotification]:
        return self.sync.notifications()

    def flush(self) -> None:
        """Wait for pending durable writes and write the cache."""
        self.sync.flush()
        if self.cache is not None:
            self.cache.flush()

    def close(self) -> None:
        self.sync.close()
        if self.cache is not None:
            self.cache.close()
