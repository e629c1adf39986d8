"""Per-contact statistics over direct chats.

A person may own several handles (a phone number and an email, say). Every
query accepts one handle or a list; a list is answered by computing each
handle on its own and merging the results, never by joining on a name.
"""

from __future__ import annotations

from typing import Sequence, Union

from chat_stats.analysis import reactions, text
from chat_stats.analysis.temporal import (
    CalendarDate,
    average_per_day,
    days_since,
    longest_consecutive_run,
    year_span_days,
)
from chat_stats.exceptions import MalformedInputError
from chat_stats.filters import predicates
from chat_stats.filters.predicates import Clause, and_
from chat_stats.filters.sender import SenderFilter
from chat_stats.stats.base import (
    DIRECT_FROM,
    Session,
    StatsQueries,
    degrades_to,
    distinct_days,
    most_active,
    parse_year,
)
from chat_stats.stats.models import (
    ReactionTally,
    SearchResults,
    StatsBlock,
    TokenCount,
    YearCount,
)

Handles = Union[str, Sequence[str]]


def handle_list(handles: Handles | None) -> list[str]:
    """Normalize one handle or a list into unique, non-empty handles in order."""
    if isinstance(handles, str):
        values = [handles]
    else:
        values = list(handles or [])
    unique = list(dict.fromkeys(h for h in values if h))
    if not unique:
        raise MalformedInputError("At least one contact handle is required")
    return unique


class ContactStatsQueries(StatsQueries):
    """Statistics for the direct chats with one person."""

    def _scope(self, handles: list[str]) -> Clause:
        return and_(self._direct_scope(), predicates.handle_in(handles))

    def _texts(
        self,
        session: Session,
        handle: str,
        person: SenderFilter,
        year: int | None,
    ) -> list[str]:
        scope = and_(
            self._scope([handle]), predicates.sender(person), session.year_window(year)
        )
        return session.texts(DIRECT_FROM, scope)

    @degrades_to(lambda: None)
    def stats(self, handles: Handles, year: int | str | None = None) -> StatsBlock | None:
        """Stats for one handle; a list of handles is combined."""
        if not isinstance(handles, str):
            return self.combined_stats(handles, year)
        year = parse_year(year)
        with self._session() as session:
            return self._stats_block(session, DIRECT_FROM, self._scope([handles]), year)

    @degrades_to(lambda: None)
    def stats_by_year(self, handles: Handles, year: int | str) -> StatsBlock | None:
        if parse_year(year) is None:
            raise MalformedInputError("stats_by_year needs a year")
        return self.stats(handles, year)

    @degrades_to(lambda: None)
    def combined_stats(
        self, handles: Sequence[str], year: int | str | None = None
    ) -> StatsBlock | None:
        """Sum of each handle's stats; the streak uses the union of their days."""
        handles = handle_list(handles)
        year = parse_year(year)
        with self._session() as session:
            blocks = [
                self._stats_block(session, DIRECT_FROM, self._scope([h]), year)
                for h in handles
            ]
            union = session.calendar_dates(
                DIRECT_FROM, and_(self._scope(handles), session.year_window(year))
            )
            unit = session.unit
        return self._merge(blocks, union, year, unit)

    def _merge(
        self,
        blocks: list[StatsBlock],
        union: list[CalendarDate],
        year: int | None,
        unit: str,
    ) -> StatsBlock:
        total = sum(b.total_messages for b in blocks)
        firsts = [b.first_message_date for b in blocks if b.first_message_date is not None]
        first = min(firsts) if firsts else None

        if year is not None:
            by_year = [YearCount(year=year, count=total)]
            peak: YearCount | None = by_year[0]
            avg = average_per_day(total, year_span_days(year))
        else:
            per_year: dict[int, int] = {}
            for block in blocks:
                for yc in block.messages_by_year:
                    per_year[yc.year] = per_year.get(yc.year, 0) + yc.count
            by_year = [YearCount(year=y, count=per_year[y]) for y in sorted(per_year)]
            peak = most_active(by_year)
            avg = average_per_day(total, days_since(first, self.clock(), unit))

        return StatsBlock(
            total_messages=total,
            sent_messages=sum(b.sent_messages for b in blocks),
            received_messages=sum(b.received_messages for b in blocks),
            first_message_date=first,
            messages_by_year=by_year,
            most_active_year=peak.year if peak else None,
            most_active_year_count=peak.count if peak else 0,
            avg_per_day=avg,
            longest_streak=longest_consecutive_run(distinct_days(union)),
        )

    @degrades_to(list)
    def words(
        self,
        handles: Handles,
        limit: int = 20,
        sender: SenderFilter | str | None = "both",
        year: int | str | None = None,
    ) -> list[TokenCount]:
        handles = handle_list(handles)
        person = SenderFilter.parse(sender)
        year = parse_year(year)
        with self._session() as session:
            counters = [
                text.count_words(self._texts(session, h, person, year)) for h in handles
            ]
        merged = text.merge_counts(counters)
        return [TokenCount(w, c) for w, c in text.top_tokens(merged, limit)]

    @degrades_to(list)
    def emojis(
        self,
        handles: Handles,
        limit: int = 10,
        sender: SenderFilter | str | None = "both",
        year: int | str | None = None,
    ) -> list[TokenCount]:
        handles = handle_list(handles)
        person = SenderFilter.parse(sender)
        year = parse_year(year)
        with self._session() as session:
            counters = [
                text.count_emojis(self._texts(session, h, person, year)) for h in handles
            ]
        merged = text.merge_counts(counters)
        return [TokenCount(e, c) for e, c in text.top_tokens(merged, limit)]

    @degrades_to(ReactionTally)
    def reactions(self, handles: Handles, year: int | str | None = None) -> ReactionTally:
        """Tapbacks you sent to and received from this person."""
        handles = handle_list(handles)
        year = parse_year(year)
        with self._session() as session:
            scope = and_(
                self._direct_chats(),
                predicates.handle_in(handles),
                session.year_window(year),
            )
            yours = session.tapback_counts(DIRECT_FROM, and_(scope, predicates.from_me(True)))
            theirs = session.tapback_counts(DIRECT_FROM, and_(scope, predicates.from_me(False)))
        return ReactionTally(
            your_reactions=reactions.tally(yours),
            their_reactions=reactions.tally(theirs),
        )

    @degrades_to(SearchResults)
    def search(
        self,
        handles: Handles,
        term: str,
        limit: int | None = 10,
        offset: int = 0,
        sender: SenderFilter | str | None = "both",
    ) -> SearchResults:
        """Messages containing ``term`` (case-insensitive), newest first."""
        handles = handle_list(handles)
        person = SenderFilter.parse(sender)
        with self._session() as session:
            scope = and_(self._scope(handles), predicates.sender(person))
            return self._search(session, DIRECT_FROM, scope, term, limit, offset)
