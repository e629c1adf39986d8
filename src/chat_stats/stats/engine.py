"""Single entry point wiring the query families to one snapshot and policy."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable

from chat_stats.config import StatsConfig
from chat_stats.contacts.directory import ContactDirectory
from chat_stats.filters.policy import ChatKind, FilterPolicy
from chat_stats.snapshot.store import SnapshotStore
from chat_stats.stats.base import degrades_to
from chat_stats.stats.contacts import ContactStatsQueries
from chat_stats.stats.group_chats import GroupChatQueries
from chat_stats.stats.overview import OverviewStatsQueries

logger = logging.getLogger(__name__)


class StatsEngine:
    """Read-only statistics over a Messages snapshot.

    Usage::

        engine = StatsEngine.from_env()
        engine.overview.total_messages()
        engine.contacts.stats("+15195551234")
        engine.group_chats.top_group_chats(limit=10)
    """

    def __init__(
        self,
        config: StatsConfig | None = None,
        store: SnapshotStore | None = None,
        policy: FilterPolicy | None = None,
        clock: Callable[[], float] = time.time,
        directory: ContactDirectory | None = None,
    ):
        self.config = config or StatsConfig()
        self.store = store or SnapshotStore(self.config.snapshot_path)
        self.policy = policy or FilterPolicy(self.config.excluded_handles)

        shared = dict(
            store=self.store,
            policy=self.policy,
            tz=self.config.timezone,
            timestamp_unit=self.config.timestamp_unit,
            clock=clock,
            directory=directory,
        )
        self.overview = OverviewStatsQueries(**shared)
        self.contacts = ContactStatsQueries(**shared)
        self.group_chats = GroupChatQueries(**shared)

    @classmethod
    def from_env(cls, **kwargs) -> "StatsEngine":
        return cls(config=StatsConfig.from_env(), **kwargs)

    @degrades_to(lambda: None)
    def chat_kind(self, chat_id: int) -> ChatKind | None:
        """Direct or group, from current membership; None if the chat is unknown."""
        with self.store.session() as conn:
            return self.policy.chat_kind(conn, chat_id)

    def refresh(self, source: Path | str | None = None) -> Path:
        """Re-copy the live database over the snapshot.

        Callers must make sure no query is running while this executes.
        """
        logger.info("Refreshing snapshot %s", self.store.path)
        return self.store.clone_from(source)
