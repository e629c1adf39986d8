"""App-wide statistics over all direct chats."""

from __future__ import annotations

from chat_stats.analysis import text
from chat_stats.analysis.temporal import average_per_day
from chat_stats.filters import predicates
from chat_stats.filters.predicates import and_, where
from chat_stats.stats.base import (
    DIRECT_FROM,
    StatsQueries,
    degrades_to,
    distinct_days,
    most_active,
    parse_year,
    year_counts,
)
from chat_stats.stats.models import (
    ContactCount,
    OverviewStats,
    SentReceived,
    TokenCount,
    YearCount,
)

MESSAGE_FROM = "FROM message"


class OverviewStatsQueries(StatsQueries):
    """Totals, yearly breakdown and rankings across every direct chat."""

    @degrades_to(int)
    def total_messages(self) -> int:
        """Distinct eligible messages in direct chats with non-excluded handles."""
        scope = self._direct_scope()
        with self._session() as session:
            row = session.fetchone(
                f"SELECT COUNT(DISTINCT message.ROWID) AS count {DIRECT_FROM} {where(scope)}",
                scope.params,
            )
        return row["count"] or 0

    @degrades_to(list)
    def messages_by_year(self) -> list[YearCount]:
        with self._session() as session:
            dates = session.calendar_dates(DIRECT_FROM, self._direct_scope())
        return year_counts(dates)

    @degrades_to(list)
    def available_years(self) -> list[int]:
        """Years with at least one eligible message in any chat, newest first."""
        with self._session() as session:
            dates = session.calendar_dates(MESSAGE_FROM, self.policy.eligible())
        return sorted({d.year for d in dates}, reverse=True)

    @degrades_to(list)
    def top_contacts(
        self, limit: int | None = None, year: int | str | None = None
    ) -> list[ContactCount]:
        """Direct-chat handles by message count, highest first."""
        year = parse_year(year)
        with self._session() as session:
            clause = and_(
                self._direct_scope(),
                predicates.known_handle(),
                session.year_window(year),
            )
            sql = f"""
                SELECT handle.id AS handle, COUNT(DISTINCT message.ROWID) AS message_count
                {DIRECT_FROM}
                {where(clause)}
                GROUP BY handle.id
                ORDER BY message_count DESC, handle.id
            """
            params = clause.params
            if limit:
                sql += " LIMIT ?"
                params += (limit,)
            rows = session.fetchall(sql, params)

        return [
            ContactCount(
                handle=row["handle"],
                display_label=self._label(row["handle"]),
                message_count=row["message_count"],
            )
            for row in rows
        ]

    @degrades_to(SentReceived)
    def sent_vs_received(self) -> SentReceived:
        scope = self._direct_scope()
        with self._session() as session:
            rows = session.fetchall(
                f"""
                SELECT message.is_from_me AS is_from_me,
                       COUNT(DISTINCT message.ROWID) AS count
                {DIRECT_FROM}
                {where(scope)}
                GROUP BY message.is_from_me
                """,
                scope.params,
            )
        result = SentReceived()
        for row in rows:
            if row["is_from_me"] == 1:
                result.sent += row["count"]
            else:
                result.received += row["count"]
        return result

    @degrades_to(lambda: None)
    def most_active_year(self) -> YearCount | None:
        return most_active(self.messages_by_year())

    @degrades_to(int)
    def average_messages_per_day(self) -> int:
        """Messages per active day, rounded to a whole number."""
        with self._session() as session:
            dates = session.calendar_dates(DIRECT_FROM, self._direct_scope())
        return average_per_day(len(dates), len(distinct_days(dates)), precision=0)

    @degrades_to(list)
    def all_words(self, limit: int = 30) -> list[TokenCount]:
        """Most used words across everything the user has sent, in any chat.

        Unlike the per-contact word lists this is not limited to direct chats
        and ignores the exclusion list.
        """
        scope = and_(self.policy.eligible(), predicates.from_me(True))
        with self._session() as session:
            texts = session.texts(MESSAGE_FROM, scope)
        return [TokenCount(w, c) for w, c in text.word_frequencies(texts, limit)]

    @degrades_to(OverviewStats)
    def all_stats(self) -> OverviewStats:
        return OverviewStats(
            total_messages=self.total_messages(),
            messages_by_year=self.messages_by_year(),
            top_contacts=self.top_contacts(),
            sent_vs_received=self.sent_vs_received(),
            most_active_year=self.most_active_year(),
            avg_per_day=self.average_messages_per_day(),
        )
