"""Aggregation queries over a Messages snapshot."""

from chat_stats.stats.engine import StatsEngine
from chat_stats.stats.models import (
    ContactCount,
    GroupChatSummary,
    GroupStatsBlock,
    MessageExample,
    OverviewStats,
    ParticipantCount,
    ReactionTally,
    SearchResults,
    SentReceived,
    StatsBlock,
    TokenCount,
    YearCount,
)

__all__ = [
    "StatsEngine",
    "ContactCount",
    "GroupChatSummary",
    "GroupStatsBlock",
    "MessageExample",
    "OverviewStats",
    "ParticipantCount",
    "ReactionTally",
    "SearchResults",
    "SentReceived",
    "StatsBlock",
    "TokenCount",
    "YearCount",
]
