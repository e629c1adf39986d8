"""Which rows are eligible for analysis."""

from __future__ import annotations

import sqlite3
from enum import Enum
from typing import Iterable

from chat_stats.exceptions import ChatNotFoundError
from chat_stats.filters import predicates
from chat_stats.filters.predicates import Clause

# Keeps exclusion clauses non-empty; cannot match a real handle.
EXCLUSION_SENTINEL = "__DUMMY_NEVER_MATCH__"


class ChatKind(Enum):
    DIRECT = "direct"
    GROUP = "group"


def is_eligible_message(associated_type: int | None) -> bool:
    """True for plain messages, False for tapbacks."""
    return associated_type is None or associated_type == 0


class FilterPolicy:
    """Exclusion list plus the direct/group and message/tapback partitions."""

    def __init__(self, excluded_handles: Iterable[str] | None = None):
        handles = {h for h in (excluded_handles or ()) if h}
        handles.add(EXCLUSION_SENTINEL)
        self.excluded_handles: frozenset[str] = frozenset(handles)

    def is_eligible_message(self, associated_type: int | None) -> bool:
        return is_eligible_message(associated_type)

    def is_excluded_handle(self, handle: str | None) -> bool:
        return handle in self.excluded_handles

    def eligible(self) -> Clause:
        return predicates.eligible_message()

    def not_excluded(self, column: str = "handle.id") -> Clause:
        # Sorted so generated SQL is stable across runs.
        return predicates.not_excluded(sorted(self.excluded_handles), column)

    def sender_not_excluded(self) -> Clause:
        return predicates.sender_not_excluded(sorted(self.excluded_handles))

    def chat_kind(self, conn: sqlite3.Connection, chat_id: int) -> ChatKind:
        """Classify a chat from its membership count; raises if it does not exist."""
        row = conn.execute(
            """
            SELECT
                chat.ROWID AS chat_id,
                COUNT(DISTINCT chat_handle_join.handle_id) AS member_count
            FROM chat
            LEFT JOIN chat_handle_join ON chat_handle_join.chat_id = chat.ROWID
            WHERE chat.ROWID = ?
            GROUP BY chat.ROWID
            """,
            (chat_id,),
        ).fetchone()
        if row is None:
            raise ChatNotFoundError(f"No chat with id {chat_id}")
        if row["member_count"] == 1:
            return ChatKind.DIRECT
        return ChatKind.GROUP
