"""Result models returned by the statistics queries."""

from __future__ import annotations

from dataclasses import dataclass, field

from chat_stats.analysis.reactions import ReactionCount, empty_tally


@dataclass
class YearCount:
    year: int
    count: int


@dataclass
class ContactCount:
    """A direct-chat handle ranked by eligible message count."""

    handle: str
    display_label: str
    message_count: int


@dataclass
class SentReceived:
    sent: int = 0
    received: int = 0

    @property
    def total(self) -> int:
        return self.sent + self.received


@dataclass
class TokenCount:
    token: str
    count: int


@dataclass
class GroupChatSummary:
    chat_id: int
    display_name: str | None  # None when missing or auto-generated
    message_count: int
    participant_count: int
    participant_handles: list[str] = field(default_factory=list)


@dataclass
class ParticipantCount:
    """Received-message count for one member of a group chat."""

    handle: str
    display_label: str
    message_count: int


@dataclass
class StatsBlock:
    """Totals, per-year breakdown, average and streak for one contact or person."""

    total_messages: int = 0
    sent_messages: int = 0
    received_messages: int = 0
    first_message_date: int | None = None  # raw store timestamp
    messages_by_year: list[YearCount] = field(default_factory=list)
    most_active_year: int | None = None
    most_active_year_count: int = 0
    avg_per_day: float = 0
    longest_streak: int = 0


@dataclass
class GroupStatsBlock(StatsBlock):
    display_name: str = "Unnamed Group"
    participant_count: int = 0


@dataclass
class MessageExample:
    text: str
    date: int | None
    is_from_me: bool
    formatted_date: str
    sender_handle: str | None = None


@dataclass
class SearchResults:
    count: int = 0
    examples: list[MessageExample] = field(default_factory=list)


@dataclass
class ReactionTally:
    """Tapbacks sent by the user and by the other side, six categories each."""

    your_reactions: list[ReactionCount] = field(default_factory=empty_tally)
    their_reactions: list[ReactionCount] = field(default_factory=empty_tally)


@dataclass
class OverviewStats:
    total_messages: int = 0
    messages_by_year: list[YearCount] = field(default_factory=list)
    top_contacts: list[ContactCount] = field(default_factory=list)
    sent_vs_received: SentReceived = field(default_factory=SentReceived)
    most_active_year: YearCount | None = None
    avg_per_day: int = 0
