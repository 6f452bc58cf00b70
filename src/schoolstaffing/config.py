"""Runtime configuration for the planner."""

import json
import os
from dataclasses import dataclass, fields
from datetime import tzinfo
from pathlib import Path
from typing import Optional, Union
from zoneinfo import ZoneInfo

from schoolstaffing.domain.models import TimeWindow

ENV_PREFIX = "SCHOOLSTAFFING_"


@dataclass
class PlannerConfig:
    """Planner settings.

    Attributes:
        organization_id: Tenant key for durable writes.
        cache_path: Location of the local snapshot cache. None disables it.
        cache_debounce_seconds: Quiet period before the cache is written.
        notification_ttl_seconds: Lifetime of sync-failure notifications.
        timezone: IANA zone name used to map instants to calendar days.
            None uses the system local zone.
        fallback_lesson_start: Lesson start when neither the group nor its
            grade level defines one.
        fallback_lesson_end: Matching lesson end.
    """

    organization_id: str = "default"
    cache_path: Optional[str] = None
    cache_debounce_seconds: float = 1.0
    notification_ttl_seconds: float = 5.0
    timezone: Optional[str] = None
    fallback_lesson_start: str = "08:30"
    fallback_lesson_end: str = "14:30"

    @property
    def tzinfo(self) -> Optional[tzinfo]:
        return ZoneInfo(self.timezone) if self.timezone else None

    @property
    def fallback_lesson_window(self) -> TimeWindow:
        return TimeWindow.from_strings(self.fallback_lesson_start, self.fallback_lesson_end)

    @classmethod
    def from_dict(cls, data: dict) -> "PlannerConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        return cls(**data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "PlannerConfig":
        """Load settings from a JSON file, then apply environment overrides."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.from_env(base=cls.from_dict(data))

    @classmethod
    def from_env(
        cls,
        base: Optional["PlannerConfig"] = None,
        environ: Optional[dict] = None,
    ) -> "PlannerConfig":
        """Apply ``SCHOOLSTAFFING_*`` environment variables on top of ``base``."""
        config = base or cls()
        env = os.environ if environ is None else environ
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            if f.name.endswith("_seconds"):
                value = float(raw)
            elif f.name in ("cache_path", "timezone"):
                # Empty string unsets
                value = raw or None
            else:
                value = raw
            setattr(config, f.name, value)
        return config
