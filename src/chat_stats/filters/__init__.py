"""Row eligibility rules and the SQL predicates built from them."""

from chat_stats.filters.policy import EXCLUSION_SENTINEL, ChatKind, FilterPolicy
from chat_stats.filters.sender import SenderFilter, SenderKind

__all__ = [
    "EXCLUSION_SENTINEL",
    "ChatKind",
    "FilterPolicy",
    "SenderFilter",
    "SenderKind",
]
