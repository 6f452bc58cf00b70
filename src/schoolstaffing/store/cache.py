"""Debounced on-disk cache of the roster snapshot."""

import json
import logging
import threading
from pathlib import Path
from typing import Optional, Union

from schoolstaffing.domain.models import Roster
from schoolstaffing.errors import RosterFormatError
from schoolstaffing.store.codec import roster_from_dict, roster_to_dict

logger = logging.getLogger(__name__)


class LocalCache:
    """Keeps a JSON copy of the latest snapshot as an offline fallback.

    Successive saves within ``debounce_seconds`` collapse into one write of
    the most recent snapshot.
    """

    def __init__(self, path: Union[str, Path], debounce_seconds: float = 1.0):
        self.path = Path(path)
        self.debounce_seconds = debounce_seconds
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[Roster] = None

    def save(self, roster: Roster) -> None:
        """Schedule a write of ``roster``, replacing any pending one."""
        with self._lock:
            self._pending = roster
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self.flush)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> None:
        """Write the pending snapshot now, if there is one."""
        with self._lock:
            roster, self._pending = self._pending, None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        if roster is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(roster_to_dict(roster), indent=2), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            logger.error("Could not write cache %s: %s", self.path, e)
            return
        logger.debug("Cached snapshot to %s", self.path)

    def load(self) -> Optional[Roster]:
        """Read the cached snapshot, or None if missing or unreadable."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return roster_from_dict(data)
        except (OSError, json.JSONDecodeError, RosterFormatError) as e:
            logger.warning("Ignoring unreadable cache %s: %s", self.path, e)
            return None

    def close(self) -> None:
        """Write any pending snapshot and stop the timer."""
        self.flush()
