"""Fixtures building a miniature chat.db snapshot in tmp_path."""

import sqlite3
from datetime import datetime

import pytest
from dateutil import tz

from chat_stats.analysis.temporal import from_datetime
from chat_stats.config import StatsConfig
from chat_stats.stats.engine import StatsEngine

UTC = tz.UTC

# 2024-01-01 00:00:00 UTC, used as "now" so averages are reproducible.
FIXED_NOW = datetime(2024, 1, 1, tzinfo=UTC).timestamp()


class SnapshotBuilder:
    """Writes handles, chats and messages into a fresh chat.db."""

    def __init__(self, path):
        self.path = path
        self.conn = sqlite3.connect(str(path))
        self.conn.executescript("""
            CREATE TABLE message (
                ROWID INTEGER PRIMARY KEY,
                guid TEXT,
                text TEXT,
                date INTEGER,
                is_from_me INTEGER DEFAULT 0,
                handle_id INTEGER DEFAULT 0,
                associated_message_type INTEGER DEFAULT 0
            );
            CREATE TABLE handle (
                ROWID INTEGER PRIMARY KEY,
                id TEXT
            );
            CREATE TABLE chat (
                ROWID INTEGER PRIMARY KEY,
                chat_identifier TEXT,
                display_name TEXT
            );
            CREATE TABLE chat_message_join (
                chat_id INTEGER,
                message_id INTEGER
            );
            CREATE TABLE chat_handle_join (
                chat_id INTEGER,
                handle_id INTEGER
            );
        """)
        self.handles: dict[str, int] = {}

    def handle(self, handle_id: str) -> int:
        if handle_id not in self.handles:
            cur = self.conn.execute("INSERT INTO handle (id) VALUES (?)", (handle_id,))
            self.handles[handle_id] = cur.lastrowid
        return self.handles[handle_id]

    def chat(self, members, display_name=None, chat_identifier=None) -> int:
        identifier = chat_identifier or (members[0] if len(members) == 1 else None)
        cur = self.conn.execute(
            "INSERT INTO chat (chat_identifier, display_name) VALUES (?, ?)",
            (identifier, display_name),
        )
        chat_id = cur.lastrowid
        for member in members:
            self.conn.execute(
                "INSERT INTO chat_handle_join (chat_id, handle_id) VALUES (?, ?)",
                (chat_id, self.handle(member)),
            )
        return chat_id

    def message(
        self,
        chat_id,
        when,
        text="hello there",
        from_me=False,
        sender=None,
        associated_type=0,
    ) -> int:
        """Insert a message; ``sender`` is the author handle of a received message."""
        handle_rowid = 0 if from_me or sender is None else self.handle(sender)
        cur = self.conn.execute(
            """
            INSERT INTO message (text, date, is_from_me, handle_id, associated_message_type)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                text,
                from_datetime(when) if when is not None else None,
                1 if from_me else 0,
                handle_rowid,
                associated_type,
            ),
        )
        message_id = cur.lastrowid
        self.conn.execute(
            "INSERT INTO chat_message_join (chat_id, message_id) VALUES (?, ?)",
            (chat_id, message_id),
        )
        return message_id

    def direct(self, handle_id: str) -> int:
        """Chat whose only member is ``handle_id``."""
        return self.chat([handle_id])

    def commit(self):
        self.conn.commit()

    def close(self):
        self.conn.close()


@pytest.fixture
def snapshot(tmp_path):
    builder = SnapshotBuilder(tmp_path / "chat_clone.db")
    yield builder
    builder.close()


@pytest.fixture
def make_engine():
    """Engine over a builder's snapshot, in UTC with a fixed clock."""

    def _make(builder, excluded=(), **kwargs):
        builder.commit()
        config = StatsConfig(
            snapshot_path=builder.path,
            excluded_handles=frozenset(excluded),
            timezone=UTC,
        )
        return StatsEngine(config=config, clock=lambda: FIXED_NOW, **kwargs)

    return _make
