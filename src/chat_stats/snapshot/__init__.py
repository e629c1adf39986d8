"""Snapshot of the Messages database (read-only)."""

from chat_stats.snapshot.store import DEFAULT_SOURCE_PATH, SnapshotStore, has_read_access

__all__ = [
    "DEFAULT_SOURCE_PATH",
    "SnapshotStore",
    "has_read_access",
]
