"""Parameterized SQL predicates shared by every aggregation query.

Each builder returns a :class:`Clause` holding a SQL fragment and its bound
parameters. Clauses are combined with :func:`and_`, which skips empty clauses
so optional filters can be passed as ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Sequence

from chat_stats.analysis.reactions import REPLACED_TAPBACK_TYPE
from chat_stats.exceptions import MalformedInputError

if TYPE_CHECKING:
    from chat_stats.filters.sender import SenderFilter

# Chats whose membership has exactly one distinct handle.
DIRECT_CHAT_IDS = """
    SELECT chat_id
    FROM chat_handle_join
    GROUP BY chat_id
    HAVING COUNT(DISTINCT handle_id) = 1
"""

# Chats with more than one distinct member handle.
GROUP_CHAT_IDS = """
    SELECT chat_id
    FROM chat_handle_join
    GROUP BY chat_id
    HAVING COUNT(DISTINCT handle_id) > 1
"""


@dataclass(frozen=True)
class Clause:
    sql: str
    params: tuple = ()

    def __bool__(self) -> bool:
        return bool(self.sql)


EMPTY = Clause("")


def and_(*clauses: Clause | None) -> Clause:
    parts = [c for c in clauses if c]
    if not parts:
        return EMPTY
    if len(parts) == 1:
        return parts[0]
    sql = " AND ".join(f"({c.sql})" for c in parts)
    params: tuple = ()
    for c in parts:
        params += c.params
    return Clause(sql, params)


def where(clause: Clause) -> str:
    return f"WHERE {clause.sql}" if clause else ""


def _placeholders(values: Sequence) -> str:
    return ", ".join("?" for _ in values)


def eligible_message() -> Clause:
    return Clause(
        "message.associated_message_type IS NULL "
        "OR message.associated_message_type = 0"
    )


def tapback_message() -> Clause:
    return Clause(
        "message.associated_message_type IS NOT NULL "
        "AND message.associated_message_type != 0 "
        "AND message.associated_message_type != ?",
        (REPLACED_TAPBACK_TYPE,),
    )


def not_excluded(handles: Iterable[str], column: str = "handle.id") -> Clause:
    values = tuple(handles)
    if not values:
        return EMPTY
    return Clause(f"{column} NOT IN ({_placeholders(values)})", values)


def sender_not_excluded(handles: Iterable[str]) -> Clause:
    """Drop messages written by an excluded handle; the user's own always pass."""
    values = tuple(handles)
    if not values:
        return EMPTY
    return Clause(
        "message.handle_id IS NULL OR message.handle_id NOT IN "
        f"(SELECT ROWID FROM handle WHERE id IN ({_placeholders(values)}))",
        values,
    )


def known_handle(column: str = "handle.id") -> Clause:
    return Clause(f"{column} IS NOT NULL AND {column} != ''")


def handle_in(handles: Iterable[str], column: str = "handle.id") -> Clause:
    values = tuple(handles)
    if not values:
        raise MalformedInputError("At least one handle is required")
    return Clause(f"{column} IN ({_placeholders(values)})", values)


def direct_chat(column: str = "chat_message_join.chat_id") -> Clause:
    return Clause(f"{column} IN ({DIRECT_CHAT_IDS})")


def group_chat(column: str = "chat_message_join.chat_id") -> Clause:
    return Clause(f"{column} IN ({GROUP_CHAT_IDS})")


def in_chat(chat_id: int, column: str = "chat_message_join.chat_id") -> Clause:
    return Clause(f"{column} = ?", (chat_id,))


def has_timestamp() -> Clause:
    return Clause("message.date IS NOT NULL")


def timestamp_window(bounds: tuple[int, int] | None) -> Clause:
    if bounds is None:
        return EMPTY
    lo, hi = bounds
    return Clause("message.date >= ? AND message.date < ?", (lo, hi))


def has_text(allow_empty: bool = False) -> Clause:
    if allow_empty:
        return Clause("message.text IS NOT NULL")
    return Clause("message.text IS NOT NULL AND message.text != ''")


def text_contains(term: str) -> Clause:
    # LIKE metacharacters in the term are left unescaped.
    return Clause("message.text LIKE ?", (f"%{term}%",))


def from_me(flag: bool) -> Clause:
    return Clause("message.is_from_me = ?", (1 if flag else 0,))


def sender_handle(handle: str) -> Clause:
    return Clause(
        "message.handle_id IN (SELECT ROWID FROM handle WHERE id = ?)",
        (handle,),
    )


def sender(person: "SenderFilter | None") -> Clause:
    """Restrict who wrote the message; EVERYONE adds no condition."""
    if person is None:
        return EMPTY
    if person.is_me:
        return from_me(True)
    if person.is_others:
        return from_me(False)
    if person.is_handle:
        return sender_handle(person.handle)
    return EMPTY
