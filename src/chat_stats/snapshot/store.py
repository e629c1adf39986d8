"""Read-only access to a copied Messages chat.db snapshot."""

from __future__ import annotations

import logging
import os
import shutil
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from chat_stats.exceptions import (
    SnapshotCloneError,
    SnapshotReadError,
    SnapshotUnavailableError,
)

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_PATH = Path.home() / "Library" / "Messages" / "chat.db"


def has_read_access(source: Path | None = None) -> bool:
    """True if the live chat.db is readable (Full Disk Access granted)."""
    path = source or DEFAULT_SOURCE_PATH
    return path.exists() and os.access(path, os.R_OK)


class SnapshotStore:
    """A chat.db copy opened read-only for each query."""

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def __repr__(self) -> str:
        return f"SnapshotStore({str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.is_file()

    def connect(self) -> sqlite3.Connection:
        """Open a read-only connection to the snapshot."""
        if not self.exists():
            raise SnapshotUnavailableError(
                f"Snapshot not found at {self.path}. "
                "Clone the Messages database before running queries."
            )
        try:
            uri = f"{self.path.resolve().as_uri()}?mode=ro"
            conn = sqlite3.connect(uri, uri=True)
            conn.row_factory = sqlite3.Row
            return conn
        except (sqlite3.OperationalError, sqlite3.DatabaseError) as e:
            err = str(e).lower()
            if "unable to open" in err or "authorization denied" in err:
                raise SnapshotReadError(
                    f"Cannot open snapshot at {self.path}: {e}"
                ) from e
            raise SnapshotReadError(f"Failed to open snapshot: {e}") from e

    @contextmanager
    def session(self) -> Iterator[sqlite3.Connection]:
        """Connection that is closed when the block exits."""
        conn = self.connect()
        try:
            yield conn
        finally:
            conn.close()

    @staticmethod
    def max_timestamp(conn: sqlite3.Connection) -> int | None:
        row = conn.execute("SELECT MAX(ABS(date)) FROM message").fetchone()
        return row[0] if row and row[0] else None

    def clone_from(self, source: Path | str | None = None) -> Path:
        """Replace the snapshot with a fresh copy of ``source``.

        Must not run while queries against this snapshot are in flight.
        """
        src = Path(source).expanduser() if source else DEFAULT_SOURCE_PATH
        if not src.exists():
            raise SnapshotCloneError(f"Source database not found at {src}")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SnapshotCloneError(
                f"Cannot create snapshot directory {self.path.parent}: {e}"
            ) from e

        if self.path.exists():
            try:
                self.path.unlink()
            except OSError as e:
                logger.warning("Could not delete old snapshot %s: %s", self.path, e)

        try:
            shutil.copy2(src, self.path)
        except OSError as e:
            raise SnapshotCloneError(f"Failed to copy {src} to {self.path}: {e}") from e

        logger.info("Cloned %s to %s", src, self.path)
        return self.path
