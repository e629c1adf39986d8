"""Runtime configuration: snapshot location, excluded handles, timestamp reading."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import tzinfo
from pathlib import Path

from dateutil import tz as dateutil_tz

from chat_stats.analysis.temporal import NANOSECONDS, TIMESTAMP_UNITS
from chat_stats.exceptions import ConfigError

DEFAULT_SNAPSHOT_PATH = (
    Path.home() / "Library" / "Application Support" / "chat-stats" / "chatdata" / "chat_clone.db"
)

ENV_SNAPSHOT_PATH = "CHAT_STATS_SNAPSHOT_PATH"
ENV_EXCLUDED_HANDLES = "CHAT_STATS_EXCLUDED_HANDLES"
ENV_TIMESTAMP_UNIT = "CHAT_STATS_TIMESTAMP_UNIT"
ENV_TIMEZONE = "CHAT_STATS_TIMEZONE"


def parse_handle_list(raw: str | None) -> frozenset[str]:
    """Comma separated handles, blanks dropped."""
    if not raw:
        return frozenset()
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


def resolve_timezone(name: str | None) -> tzinfo | None:
    """IANA zone for ``name``; None means the machine's local zone."""
    if not name:
        return None
    zone = dateutil_tz.gettz(name)
    if zone is None:
        raise ConfigError(f"Unknown timezone: {name!r}")
    return zone


@dataclass
class StatsConfig:
    snapshot_path: Path = DEFAULT_SNAPSHOT_PATH
    excluded_handles: frozenset[str] = field(default_factory=frozenset)
    timestamp_unit: str = NANOSECONDS
    timezone: tzinfo | None = None

    def __post_init__(self):
        self.snapshot_path = Path(self.snapshot_path).expanduser()
        self.excluded_handles = frozenset(self.excluded_handles)
        if self.timestamp_unit not in TIMESTAMP_UNITS:
            raise ConfigError(
                f"timestamp_unit must be one of {', '.join(TIMESTAMP_UNITS)}, "
                f"got {self.timestamp_unit!r}"
            )

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "StatsConfig":
        """Build a config from ``CHAT_STATS_*`` variables, defaulting the rest."""
        env = os.environ if environ is None else environ
        return cls(
            snapshot_path=Path(env.get(ENV_SNAPSHOT_PATH) or DEFAULT_SNAPSHOT_PATH),
            excluded_handles=parse_handle_list(env.get(ENV_EXCLUDED_HANDLES)),
            timestamp_unit=env.get(ENV_TIMESTAMP_UNIT) or NANOSECONDS,
            timezone=resolve_timezone(env.get(ENV_TIMEZONE)),
        )
