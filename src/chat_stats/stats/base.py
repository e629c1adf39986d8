"""Shared query plumbing for the statistics families.

Every public query opens one read-only session on the snapshot, runs its
statements and closes the session before returning. Public methods are wrapped
with :func:`degrades_to` so a missing snapshot or a failing statement yields the
documented empty result instead of an exception.
"""

from __future__ import annotations

import functools
import logging
import sqlite3
import time
from collections import Counter
from contextlib import contextmanager
from datetime import date, tzinfo
from typing import Callable, Iterable, Iterator, TypeVar

from chat_stats.analysis.temporal import (
    AUTO,
    NANOSECONDS,
    CalendarDate,
    average_per_day,
    days_since,
    detect_unit,
    format_short_date,
    local_timezone,
    longest_consecutive_run,
    to_calendar_date,
    year_bounds,
    year_span_days,
)
from chat_stats.contacts.directory import ContactDirectory, format_handle
from chat_stats.exceptions import (
    ChatStatsError,
    MalformedInputError,
    SnapshotUnavailableError,
)
from chat_stats.filters import predicates
from chat_stats.filters.policy import FilterPolicy
from chat_stats.filters.predicates import EMPTY, Clause, and_, where
from chat_stats.snapshot.store import SnapshotStore
from chat_stats.stats.models import MessageExample, SearchResults, StatsBlock, YearCount

logger = logging.getLogger(__name__)

T = TypeVar("T")

# One row per (message, member handle) of the message's chat.
DIRECT_FROM = """
    FROM message
    JOIN chat_message_join ON message.ROWID = chat_message_join.message_id
    JOIN chat_handle_join ON chat_message_join.chat_id = chat_handle_join.chat_id
    JOIN handle ON chat_handle_join.handle_id = handle.ROWID
"""

# One row per message of a chat.
CHAT_FROM = """
    FROM message
    JOIN chat_message_join ON message.ROWID = chat_message_join.message_id
"""


def degrades_to(default_factory: Callable[[], T]):
    """Return ``default_factory()`` when the wrapped query cannot be answered."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except SnapshotUnavailableError as e:
                logger.warning("%s: %s", func.__qualname__, e)
            except (ChatStatsError, sqlite3.Error):
                logger.exception("%s failed", func.__qualname__)
            return default_factory()

        return wrapper

    return decorator


def parse_year(year: int | str | None) -> int | None:
    """Accept a year as int or numeric string; None or "" means no filter."""
    if year is None or year == "":
        return None
    if isinstance(year, bool):
        raise MalformedInputError(f"Invalid year: {year!r}")
    try:
        return int(year)
    except (TypeError, ValueError) as e:
        raise MalformedInputError(f"Invalid year: {year!r}") from e


def year_counts(dates: Iterable[CalendarDate]) -> list[YearCount]:
    """Message counts per year, ascending."""
    counts = Counter(d.year for d in dates)
    return [YearCount(year=y, count=counts[y]) for y in sorted(counts)]


def distinct_days(dates: Iterable[CalendarDate]) -> list[date]:
    return sorted({d.date for d in dates})


def most_active(by_year: list[YearCount]) -> YearCount | None:
    """Year with the highest count; the earliest one wins a tie."""
    if not by_year:
        return None
    return max(by_year, key=lambda yc: yc.count)


class Session:
    """An open snapshot connection plus the unit and zone used to read dates."""

    def __init__(self, conn: sqlite3.Connection, unit: str, tz: tzinfo):
        self.conn = conn
        self.unit = unit
        self.tz = tz

    def fetchone(self, sql: str, params: tuple = ()) -> sqlite3.Row | None:
        return self.conn.execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        return self.conn.execute(sql, params).fetchall()

    def year_window(self, year: int | None) -> Clause:
        if year is None:
            return EMPTY
        return predicates.timestamp_window(year_bounds(year, self.tz, self.unit))

    def calendar_dates(self, from_sql: str, scope: Clause) -> list[CalendarDate]:
        """Local date of every distinct message in ``scope`` that has a timestamp."""
        clause = and_(scope, predicates.has_timestamp())
        rows = self.fetchall(
            f"""
            SELECT DISTINCT message.ROWID AS message_id, message.date AS date
            {from_sql}
            {where(clause)}
            """,
            clause.params,
        )
        dates = []
        for row in rows:
            cal = to_calendar_date(row["date"], self.tz, self.unit)
            if cal is not None:
                dates.append(cal)
        return dates

    def texts(self, from_sql: str, scope: Clause) -> list[str]:
        """Bodies of distinct non-empty messages in ``scope``, oldest row first."""
        clause = and_(scope, predicates.has_text())
        rows = self.fetchall(
            f"""
            SELECT DISTINCT message.ROWID AS message_id, message.text AS text
            {from_sql}
            {where(clause)}
            ORDER BY message_id
            """,
            clause.params,
        )
        return [row["text"] for row in rows]

    def tapback_counts(self, from_sql: str, scope: Clause) -> list[tuple[int, int]]:
        clause = and_(scope, predicates.tapback_message())
        rows = self.fetchall(
            f"""
            SELECT message.associated_message_type AS type,
                   COUNT(DISTINCT message.ROWID) AS count
            {from_sql}
            {where(clause)}
            GROUP BY message.associated_message_type
            """,
            clause.params,
        )
        return [(row["type"], row["count"]) for row in rows]


class StatsQueries:
    """Base for the overview, contact and group chat query families."""

    def __init__(
        self,
        store: SnapshotStore,
        policy: FilterPolicy | None = None,
        tz: tzinfo | None = None,
        timestamp_unit: str = NANOSECONDS,
        clock: Callable[[], float] = time.time,
        directory: ContactDirectory | None = None,
    ):
        self.store = store
        self.policy = policy or FilterPolicy()
        self.tz = tz or local_timezone()
        self.timestamp_unit = timestamp_unit
        self.clock = clock
        self.directory = directory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with self.store.session() as conn:
            yield Session(conn, self._resolve_unit(conn), self.tz)

    def _resolve_unit(self, conn: sqlite3.Connection) -> str:
        if self.timestamp_unit == AUTO:
            return detect_unit(self.store.max_timestamp(conn))
        return self.timestamp_unit

    def _label(self, handle: str) -> str:
        if self.directory is not None:
            return self.directory.label_for(handle)
        return format_handle(handle)

    def _direct_chats(self) -> Clause:
        """Rows of direct chats whose member is not excluded."""
        return and_(self.policy.not_excluded("handle.id"), predicates.direct_chat())

    def _direct_scope(self) -> Clause:
        return and_(self.policy.eligible(), self._direct_chats())

    def _stats_block(
        self,
        session: Session,
        from_sql: str,
        scope: Clause,
        year: int | None,
        all_years: bool = False,
        block_cls: type[StatsBlock] = StatsBlock,
        **extra,
    ) -> StatsBlock:
        """Totals over ``scope`` limited to ``year``; streak over the same rows.

        With ``all_years`` the per-year breakdown ignores ``year``; otherwise a
        year-filtered block reports just ``[(year, total)]``.
        """
        filtered = and_(scope, session.year_window(year))
        row = session.fetchone(
            f"""
            SELECT
                COUNT(DISTINCT message.ROWID) AS total,
                COUNT(DISTINCT CASE WHEN message.is_from_me = 1 THEN message.ROWID END) AS sent,
                COUNT(DISTINCT CASE WHEN message.is_from_me = 0 THEN message.ROWID END) AS received,
                MIN(message.date) AS first_date
            {from_sql}
            {where(filtered)}
            """,
            filtered.params,
        )
        total = row["total"] or 0

        dates = session.calendar_dates(from_sql, scope)
        in_window = dates if year is None else [d for d in dates if d.year == year]

        if year is None or all_years:
            by_year = year_counts(dates)
        else:
            by_year = [YearCount(year=year, count=total)]

        if year is not None:
            peak: YearCount | None = YearCount(year=year, count=total)
            avg = average_per_day(total, year_span_days(year))
        else:
            peak = most_active(by_year)
            avg = average_per_day(
                total, days_since(row["first_date"], self.clock(), session.unit)
            )

        return block_cls(
            total_messages=total,
            sent_messages=row["sent"] or 0,
            received_messages=row["received"] or 0,
            first_message_date=row["first_date"],
            messages_by_year=by_year,
            most_active_year=peak.year if peak else None,
            most_active_year_count=peak.count if peak else 0,
            avg_per_day=avg,
            longest_streak=longest_consecutive_run(distinct_days(in_window)),
            **extra,
        )

    def _search(
        self,
        session: Session,
        from_sql: str,
        scope: Clause,
        term: str,
        limit: int | None,
        offset: int,
    ) -> SearchResults:
        """Count every match, then return one page of them, newest first.

        ``limit=None`` returns every match from ``offset`` on.
        """
        if not isinstance(term, str):
            raise MalformedInputError(f"Search term must be a string, got {term!r}")
        clause = and_(
            scope, predicates.has_text(allow_empty=True), predicates.text_contains(term)
        )
        count_row = session.fetchone(
            f"SELECT COUNT(DISTINCT message.ROWID) AS count {from_sql} {where(clause)}",
            clause.params,
        )
        rows = session.fetchall(
            f"""
            SELECT DISTINCT
                message.ROWID AS message_id,
                message.text AS text,
                message.date AS date,
                message.is_from_me AS is_from_me,
                sender.id AS sender_handle
            {from_sql}
            LEFT JOIN handle AS sender ON message.handle_id = sender.ROWID
            {where(clause)}
            ORDER BY date DESC, message_id DESC
            LIMIT ? OFFSET ?
            """,
            clause.params + (-1 if limit is None else limit, offset),
        )
        examples = [
            MessageExample(
                text=row["text"],
                date=row["date"],
                is_from_me=row["is_from_me"] == 1,
                formatted_date=format_short_date(row["date"], session.tz, session.unit),
                sender_handle=row["sender_handle"],
            )
            for row in rows
        ]
        return SearchResults(count=count_row["count"] or 0, examples=examples)
