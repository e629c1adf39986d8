"""Tests for the snapshot store."""

import sqlite3
from unittest.mock import patch

import pytest

from chat_stats.exceptions import (
    SnapshotCloneError,
    SnapshotReadError,
    SnapshotUnavailableError,
)
from chat_stats.snapshot.store import SnapshotStore, has_read_access


@pytest.fixture
def source_db(tmp_path):
    db_path = tmp_path / "live" / "chat.db"
    db_path.parent.mkdir()
    conn = sqlite3.connect(str(db_path))
    conn.execute("CREATE TABLE message (ROWID INTEGER PRIMARY KEY, date INTEGER)")
    conn.execute("INSERT INTO message (date) VALUES (?)", (700_000_000_000_000_000,))
    conn.commit()
    conn.close()
    return db_path


def test_missing_snapshot(tmp_path):
    store = SnapshotStore(tmp_path / "nope.db")
    assert not store.exists()
    with pytest.raises(SnapshotUnavailableError, match="not found"):
        store.connect()


def test_session_is_read_only(source_db):
    store = SnapshotStore(source_db)
    with store.session() as conn:
        assert conn.execute("SELECT COUNT(*) FROM message").fetchone()[0] == 1
        with pytest.raises(sqlite3.OperationalError):
            conn.execute("INSERT INTO message (date) VALUES (1)")


def test_session_closes_connection(source_db):
    store = SnapshotStore(source_db)
    with store.session() as conn:
        pass
    with pytest.raises(sqlite3.ProgrammingError):
        conn.execute("SELECT 1")


def test_max_timestamp(source_db):
    store = SnapshotStore(source_db)
    with store.session() as conn:
        assert store.max_timestamp(conn) == 700_000_000_000_000_000


def test_connect_failure_is_read_error(source_db):
    store = SnapshotStore(source_db)
    with patch(
        "chat_stats.snapshot.store.sqlite3.connect",
        side_effect=sqlite3.OperationalError("unable to open database file"),
    ):
        with pytest.raises(SnapshotReadError):
            store.connect()


def test_clone_from_copies_and_replaces(tmp_path, source_db):
    target = tmp_path / "app" / "chatdata" / "chat_clone.db"
    store = SnapshotStore(target)
    assert store.clone_from(source_db) == target
    assert store.exists()

    conn = sqlite3.connect(str(source_db))
    conn.execute("INSERT INTO message (date) VALUES (1)")
    conn.commit()
    conn.close()

    store.clone_from(source_db)
    with store.session() as conn:
        assert conn.execute("SELECT COUNT(*) FROM message").fetchone()[0] == 2


def test_clone_from_missing_source(tmp_path):
    store = SnapshotStore(tmp_path / "clone.db")
    with pytest.raises(SnapshotCloneError, match="not found"):
        store.clone_from(tmp_path / "missing.db")


def test_clone_copy_failure(tmp_path, source_db):
    store = SnapshotStore(tmp_path / "clone.db")
    with patch("chat_stats.snapshot.store.shutil.copy2", side_effect=OSError("disk full")):
        with pytest.raises(SnapshotCloneError, match="disk full"):
            store.clone_from(source_db)


def test_has_read_access(tmp_path, source_db):
    assert has_read_access(source_db)
    assert not has_read_access(tmp_path / "missing.db")
