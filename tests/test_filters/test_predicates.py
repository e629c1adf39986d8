"""Tests for SQL predicate builders."""

import sqlite3

import pytest

from chat_stats.exceptions import MalformedInputError
from chat_stats.filters import predicates
from chat_stats.filters.predicates import EMPTY, Clause, and_, where
from chat_stats.filters.sender import SenderFilter


def test_and_skips_empty_clauses():
    clause = and_(None, EMPTY, predicates.from_me(True))
    assert clause == predicates.from_me(True)


def test_and_combines_params_in_order():
    clause = and_(predicates.in_chat(7), predicates.text_contains("hi"))
    assert clause.sql == "(chat_message_join.chat_id = ?) AND (message.text LIKE ?)"
    assert clause.params == (7, "%hi%")


def test_and_of_nothing_is_empty():
    assert not and_()
    assert where(and_()) == ""


def test_where_prefix():
    assert where(Clause("x = 1")) == "WHERE x = 1"


def test_not_excluded_placeholders():
    clause = predicates.not_excluded(["a", "b"])
    assert clause.sql == "handle.id NOT IN (?, ?)"
    assert clause.params == ("a", "b")


def test_not_excluded_empty():
    assert predicates.not_excluded([]) is EMPTY


def test_handle_in_requires_handles():
    with pytest.raises(MalformedInputError):
        predicates.handle_in([])


def test_timestamp_window():
    assert predicates.timestamp_window(None) is EMPTY
    clause = predicates.timestamp_window((10, 20))
    assert clause.params == (10, 20)


def test_text_contains_does_not_escape():
    assert predicates.text_contains("50%").params == ("%50%%",)


def test_sender_variants():
    assert predicates.sender(None) is EMPTY
    assert predicates.sender(SenderFilter.everyone()) is EMPTY
    assert predicates.sender(SenderFilter.me()).params == (1,)
    assert predicates.sender(SenderFilter.others()).params == (0,)
    assert predicates.sender(SenderFilter.from_handle("bob@example.com")).params == (
        "bob@example.com",
    )


@pytest.fixture
def conn():
    conn = sqlite3.connect(":memory:")
    conn.executescript("""
        CREATE TABLE message (ROWID INTEGER PRIMARY KEY, text TEXT, date INTEGER,
            is_from_me INTEGER, handle_id INTEGER, associated_message_type INTEGER);
        CREATE TABLE handle (ROWID INTEGER PRIMARY KEY, id TEXT);
        CREATE TABLE chat_message_join (chat_id INTEGER, message_id INTEGER);
        CREATE TABLE chat_handle_join (chat_id INTEGER, handle_id INTEGER);
        INSERT INTO handle VALUES (1, 'alice'), (2, 'bob'), (3, 'spam');
        INSERT INTO chat_handle_join VALUES (1, 1), (2, 1), (2, 2), (3, 3);
        INSERT INTO message VALUES
            (1, 'plain', 1, 0, 1, NULL),
            (2, 'zero', 2, 1, 0, 0),
            (3, NULL, 3, 0, 1, 2000),
            (4, NULL, 4, 0, 1, 3000),
            (5, 'group', 5, 0, 2, 0),
            (6, 'spam', 6, 0, 3, 0);
        INSERT INTO chat_message_join VALUES (1, 1), (1, 2), (1, 3), (1, 4), (2, 5), (3, 6);
    """)
    yield conn
    conn.close()


def _ids(conn, clause):
    rows = conn.execute(
        f"""
        SELECT message.ROWID FROM message
        JOIN chat_message_join ON message.ROWID = chat_message_join.message_id
        {where(clause)}
        ORDER BY message.ROWID
        """,
        clause.params,
    ).fetchall()
    return [r[0] for r in rows]


def test_eligible_and_tapback_partition(conn):
    assert _ids(conn, predicates.eligible_message()) == [1, 2, 5, 6]
    assert _ids(conn, predicates.tapback_message()) == [3]


def test_direct_and_group_chats(conn):
    assert _ids(conn, predicates.direct_chat()) == [1, 2, 3, 4, 6]
    assert _ids(conn, predicates.group_chat()) == [5]


def test_sender_not_excluded_keeps_own_messages(conn):
    clause = predicates.sender_not_excluded(["spam"])
    assert _ids(conn, clause) == [1, 2, 3, 4, 5]


def test_sender_handle(conn):
    assert _ids(conn, predicates.sender_handle("bob")) == [5]
