"""Normalize tapback codes into the six canonical reaction categories."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class ReactionCategory:
    type: int
    name: str
    emoji: str


LOVE = ReactionCategory(0, "love", "❤️")
LIKE = ReactionCategory(1, "like", "👍")
DISLIKE = ReactionCategory(2, "dislike", "👎")
LAUGH = ReactionCategory(3, "laugh", "😂")
EMPHASIZE = ReactionCategory(4, "emphasize", "‼️")
QUESTION = ReactionCategory(5, "question", "❓")

CATEGORIES = (LOVE, LIKE, DISLIKE, LAUGH, EMPHASIZE, QUESTION)

# Tapback that was replaced by a newer one; never tallied.
REPLACED_TAPBACK_TYPE = 3000

# The 1000 series is not offset-ordered like the 2000 series.
_REMOVED_SERIES = {
    1000: LIKE.type,
    1001: DISLIKE.type,
    1002: LAUGH.type,
    1003: LOVE.type,
    1004: EMPHASIZE.type,
    1005: QUESTION.type,
}

_LOVED_WITH_EFFECT = 2006


@dataclass
class ReactionCount:
    category: str
    emoji: str
    type: int
    count: int = 0


def canonical_type(code: int | str | None) -> int | None:
    """Map an ``associated_message_type`` to a canonical category type."""
    if code is None:
        return None
    try:
        value = int(code)
    except (TypeError, ValueError):
        return None
    if 0 <= value <= 5:
        return value
    if value in _REMOVED_SERIES:
        return _REMOVED_SERIES[value]
    if 2000 <= value <= 2005:
        return value - 2000
    if value == _LOVED_WITH_EFFECT:
        return LOVE.type
    return None


def tally(rows: Iterable[tuple[int | None, int]]) -> list[ReactionCount]:
    """Fold ``(associated_type, count)`` rows into all six categories."""
    totals: Counter = Counter()
    for code, count in rows:
        base = canonical_type(code)
        if base is not None:
            totals[base] += count or 0
    return [
        ReactionCount(
            category=category.name,
            emoji=category.emoji,
            type=category.type,
            count=totals[category.type],
        )
        for category in CATEGORIES
    ]


def empty_tally() -> list[ReactionCount]:
    return tally([])
