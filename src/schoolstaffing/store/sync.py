"""Write-behind synchronization to durable storage.

Mutations are applied locally first and then handed to a SyncQueue, whose
single worker thread forwards them to a StorageBackend in order. A failed
write is logged and turned into a short-lived SyncNotification. It is
never retried and never rolls back the local change.
"""

import logging
import queue
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from schoolstaffing.domain.mutations import Mutation
from schoolstaffing.store.codec import mutation_to_dict

logger = logging.getLogger(__name__)

_STOP = object()


class StorageBackend(ABC):
    """Durable store for a tenant's roster."""

    @abstractmethod
    def write(self, organization_id: str, mutation: Mutation) -> None:
        """Persist one mutation. Raise on failure."""
        pass


class NullBackend(StorageBackend):
    """Backend that drops every write (offline or demo use)."""

    def write(self, organization_id: str, mutation: Mutation) -> None:
        logger.debug("Dropping %s for %s", mutation.describe(), organization_id)


class InMemoryBackend(StorageBackend):
    """Backend that records encoded writes, per organization."""

    def __init__(self):
        self._lock = threading.Lock()
        self.records: dict[str, list[dict]] = {}

    def write(self, organization_id: str, mutation: Mutation) -> None:
        payload = mutation_to_dict(mutation)
        with self._lock:
            self.records.setdefault(organization_id, []).append(payload)

    def records_for(self, organization_id: str) -> list[dict]:
        with self._lock:
            return list(self.records.get(organization_id, []))


@dataclass
class SyncNotification:
    """A transient, dismissible warning about a failed durable write."""

    message: str
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class SyncQueue:
    """Ordered background forwarding of mutations to a backend.

    Example:
        >>> sync = SyncQueue(InMemoryBackend(), "org-1")
        >>> sync.enqueue(Mutation.delete(EntityType.ABSENCE, "a1"))
        >>> sync.flush()
        >>> sync.close()
    """

    def __init__(
        self,
        backend: StorageBackend,
        organization_id: str,
        notification_ttl: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.backend = backend
        self.organization_id = organization_id
        self.notification_ttl = notification_ttl
        self._clock = clock
        self._queue: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._notifications: list[SyncNotification] = []
        self._closed = False
        self.written_count = 0
        self.failed_count = 0
        self._thread = threading.Thread(
            target=self._run,
            name=f"SyncWorker-{organization_id}",
            daemon=True,
        )
        self._thread.start()

    def enqueue(self, mutation: Mutation) -> None:
        """Schedule a durable write. Returns immediately."""
        if self._closed:
            raise RuntimeError("SyncQueue is closed")
        self._queue.put(mutation)

    def flush(self) -> None:
        """Block until every enqueued write has been attempted."""
        self._queue.join()

    def close(self, timeout: Optional[float] = None) -> None:
        """Drain outstanding writes and stop the worker."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(_STOP)
        self._thread.join(timeout)

    def notifications(self) -> list[SyncNotification]:
        """Get the failure notifications that have not expired yet."""
        now = self._clock()
        with self._lock:
            self._notifications = [n for n in self._notifications if not n.is_expired(now)]
            return list(self._notifications)

    def dismiss(self, notification: SyncNotification) -> None:
        with self._lock:
            if notification in self._notifications:
                self._notifications.remove(notification)

    def _run(self) -> None:
        logger.debug("Sync worker started for %s", self.organization_id)
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    break
                self._write(item)
            finally:
                self._queue.task_done()
        logger.debug("Sync worker stopped for %s", self.organization_id)

    def _write(self, mutation: Mutation) -> None:
        try:
            self.backend.write(self.organization_id, mutation)
        except Exception as e:
            self.failed_count += 1
            message = f"Opslaan mislukt ({mutation.describe()}): {e}"
            logger.warning("Durable write failed for %s: %s", self.organization_id, message)
            now = self._clock()
            with self._lock:
                self._notifications.append(
                    SyncNotification(
                        message=message,
                        created_at=now,
                        expires_at=now + self.notification_ttl,
                    )
                )
            return
        self.written_count += 1
        logger.debug("Wrote %s for %s", mutation.describe(), self.organization_id)
