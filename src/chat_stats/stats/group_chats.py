"""Statistics for group chats (more than one member handle)."""

from __future__ import annotations

from chat_stats.analysis import reactions, text
from chat_stats.filters import predicates
from chat_stats.filters.predicates import Clause, and_, where
from chat_stats.filters.sender import SenderFilter
from chat_stats.stats.base import (
    CHAT_FROM,
    Session,
    StatsQueries,
    degrades_to,
    parse_year,
)
from chat_stats.stats.models import (
    GroupChatSummary,
    GroupStatsBlock,
    ParticipantCount,
    ReactionTally,
    SearchResults,
    TokenCount,
)

SAMPLE_PARTICIPANTS = 5
UNNAMED_GROUP = "Unnamed Group"

# Messages auto-generate identifiers such as "chat123456789" for unnamed groups.
_GENERATED_NAME_PREFIX = "chat"


def visible_display_name(display_name: str | None) -> str | None:
    """The chat's name, or None when it is empty or auto-generated."""
    if not display_name or display_name.startswith(_GENERATED_NAME_PREFIX):
        return None
    return display_name


class GroupChatQueries(StatsQueries):
    """Rankings and per-chat statistics for group chats."""

    def _chat_scope(self, chat_id: int) -> Clause:
        return and_(
            self.policy.eligible(),
            self.policy.sender_not_excluded(),
            predicates.in_chat(chat_id),
        )

    def _members(self, session: Session, chat_id: int) -> list[str]:
        """Non-excluded member handles, in the order they joined the snapshot."""
        clause = and_(
            predicates.in_chat(chat_id, "chat_handle_join.chat_id"),
            self.policy.not_excluded("handle.id"),
        )
        rows = session.fetchall(
            f"""
            SELECT handle.id AS handle
            FROM handle
            JOIN chat_handle_join ON handle.ROWID = chat_handle_join.handle_id
            {where(clause)}
            GROUP BY handle.id
            ORDER BY MIN(handle.ROWID)
            """,
            clause.params,
        )
        return [row["handle"] for row in rows]

    def _texts(
        self,
        session: Session,
        chat_id: int,
        person: SenderFilter,
        year: int | None,
    ) -> list[str]:
        scope = and_(
            self._chat_scope(chat_id), predicates.sender(person), session.year_window(year)
        )
        return session.texts(CHAT_FROM, scope)

    @degrades_to(list)
    def top_group_chats(
        self, limit: int | None = None, year: int | str | None = None
    ) -> list[GroupChatSummary]:
        """Group chats by eligible message count, highest first."""
        year = parse_year(year)
        with self._session() as session:
            clause = and_(
                self.policy.eligible(),
                self.policy.sender_not_excluded(),
                predicates.group_chat(),
                session.year_window(year),
            )
            sql = f"""
                SELECT
                    chat.ROWID AS chat_id,
                    chat.display_name AS display_name,
                    COUNT(DISTINCT message.ROWID) AS message_count
                {CHAT_FROM}
                JOIN chat ON chat.ROWID = chat_message_join.chat_id
                {where(clause)}
                GROUP BY chat.ROWID
                ORDER BY message_count DESC, chat.ROWID
            """
            params = clause.params
            if limit:
                sql += " LIMIT ?"
                params += (limit,)
            rows = session.fetchall(sql, params)

            summaries = []
            for row in rows:
                members = self._members(session, row["chat_id"])
                summaries.append(GroupChatSummary(
                    chat_id=row["chat_id"],
                    display_name=visible_display_name(row["display_name"]),
                    message_count=row["message_count"],
                    participant_count=len(members),
                    participant_handles=members[:SAMPLE_PARTICIPANTS],
                ))
        return summaries

    @degrades_to(lambda: None)
    def stats(self, chat_id: int, year: int | str | None = None) -> GroupStatsBlock | None:
        """Totals for one group chat; the yearly breakdown always spans all years."""
        year = parse_year(year)
        with self._session() as session:
            info = session.fetchone(
                "SELECT display_name, chat_identifier FROM chat WHERE ROWID = ?",
                (chat_id,),
            )
            members = self._members(session, chat_id)
            name = None
            if info is not None:
                name = info["display_name"] or info["chat_identifier"]
            return self._stats_block(
                session,
                CHAT_FROM,
                self._chat_scope(chat_id),
                year,
                all_years=True,
                block_cls=GroupStatsBlock,
                display_name=name or UNNAMED_GROUP,
                participant_count=len(members),
            )

    @degrades_to(list)
    def participants(
        self, chat_id: int, year: int | str | None = None
    ) -> list[ParticipantCount]:
        """Every member with the number of messages they sent to the chat."""
        year = parse_year(year)
        with self._session() as session:
            on = and_(
                self.policy.eligible(),
                predicates.from_me(False),
                Clause(
                    "message.ROWID IN "
                    "(SELECT message_id FROM chat_message_join WHERE chat_id = ?)",
                    (chat_id,),
                ),
                session.year_window(year),
            )
            members = and_(
                predicates.in_chat(chat_id, "chat_handle_join.chat_id"),
                self.policy.not_excluded("handle.id"),
            )
            rows = session.fetchall(
                f"""
                SELECT handle.id AS handle, COUNT(DISTINCT message.ROWID) AS message_count
                FROM handle
                JOIN chat_handle_join ON handle.ROWID = chat_handle_join.handle_id
                LEFT JOIN message ON message.handle_id = handle.ROWID AND ({on.sql})
                {where(members)}
                GROUP BY handle.id
                ORDER BY message_count DESC, handle.id
                """,
                on.params + members.params,
            )
        return [
            ParticipantCount(
                handle=row["handle"],
                display_label=self._label(row["handle"]),
                message_count=row["message_count"],
            )
            for row in rows
        ]

    @degrades_to(list)
    def words(
        self,
        chat_id: int,
        limit: int = 20,
        person: SenderFilter | str | None = None,
        year: int | str | None = None,
    ) -> list[TokenCount]:
        person = SenderFilter.parse(person)
        year = parse_year(year)
        with self._session() as session:
            texts = self._texts(session, chat_id, person, year)
        return [TokenCount(w, c) for w, c in text.word_frequencies(texts, limit)]

    @degrades_to(list)
    def emojis(
        self,
        chat_id: int,
        limit: int = 10,
        person: SenderFilter | str | None = None,
        year: int | str | None = None,
    ) -> list[TokenCount]:
        person = SenderFilter.parse(person)
        year = parse_year(year)
        with self._session() as session:
            texts = self._texts(session, chat_id, person, year)
        return [TokenCount(e, c) for e, c in text.emoji_frequencies(texts, limit)]

    @degrades_to(SearchResults)
    def search(
        self,
        chat_id: int,
        term: str,
        limit: int | None = 10,
        offset: int = 0,
        person: SenderFilter | str | None = None,
    ) -> SearchResults:
        person = SenderFilter.parse(person)
        with self._session() as session:
            scope = and_(self._chat_scope(chat_id), predicates.sender(person))
            return self._search(session, CHAT_FROM, scope, term, limit, offset)

    @degrades_to(ReactionTally)
    def reactions(
        self,
        chat_id: int,
        person: SenderFilter | str | None = None,
        year: int | str | None = None,
    ) -> ReactionTally:
        """Tapbacks in the chat; a specific handle narrows only the other side."""
        person = SenderFilter.parse(person)
        year = parse_year(year)
        with self._session() as session:
            scope = and_(predicates.in_chat(chat_id), session.year_window(year))
            yours = session.tapback_counts(CHAT_FROM, and_(scope, predicates.from_me(True)))
            theirs_scope = and_(
                scope,
                predicates.from_me(False),
                self.policy.sender_not_excluded(),
                predicates.sender(person) if person.is_handle else None,
            )
            theirs = session.tapback_counts(CHAT_FROM, theirs_scope)
        return ReactionTally(
            your_reactions=reactions.tally(yours),
            their_reactions=reactions.tally(theirs),
        )
