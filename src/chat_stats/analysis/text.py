"""Word and emoji frequency tables over message bodies."""

from __future__ import annotations

import re
from collections import Counter
from typing import Iterable

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "been", "be",
    "have", "has", "had", "do", "does", "did", "will", "would", "should",
    "could", "may", "might", "must", "can", "i", "you", "he", "she", "it",
    "we", "they", "them", "their", "this", "that", "these", "those", "am",
    "my", "your", "me", "im", "just", "so", "dont", "didnt", "cant", "wont",
    "like", "yeah", "yes", "no", "ok", "okay", "lol", "haha", "oh", "ah", "um",
    "uh", "gonna", "wanna", "gotta", "get", "got", "not",
})

MIN_WORD_LENGTH = 3

# Word chars are ASCII-only, so accented letters split words.
_NON_WORD = re.compile(r"[^\w\s']", re.ASCII)

EMOJI_PATTERN = re.compile(
    "["
    "\U0001F600-\U0001F64F"  # emoticons
    "\U0001F300-\U0001F5FF"  # symbols & pictographs
    "\U0001F680-\U0001F6FF"  # transport & map
    "\U0001F1E0-\U0001F1FF"  # flags
    "\u2600-\u26FF"  # misc symbols
    "\u2700-\u27BF"  # dingbats
    "\U0001F900-\U0001F9FF"  # supplemental symbols & pictographs
    "\U0001F018-\U0001F270"
    "\u238C-\u2454"  # misc technical, control pictures
    "\u20D0-\u20FF"  # combining marks for symbols
    "]"
)


def tokenize(text: str | None) -> list[str]:
    """Lowercase word tokens of ``text`` with short tokens and stop words removed."""
    if not text:
        return []
    cleaned = _NON_WORD.sub(" ", text.lower())
    return [
        word for word in cleaned.split()
        if len(word) >= MIN_WORD_LENGTH and word not in STOP_WORDS
    ]


def extract_emojis(text: str | None) -> list[str]:
    """Every emoji code point in ``text``, repeats included."""
    if not text:
        return []
    return EMOJI_PATTERN.findall(text)


def count_words(texts: Iterable[str | None]) -> Counter:
    counts: Counter = Counter()
    for text in texts:
        counts.update(tokenize(text))
    return counts


def count_emojis(texts: Iterable[str | None]) -> Counter:
    counts: Counter = Counter()
    for text in texts:
        counts.update(extract_emojis(text))
    return counts


def merge_counts(counters: Iterable[Counter]) -> Counter:
    """Sum counters, keeping the order in which tokens were first seen."""
    merged: Counter = Counter()
    for counter in counters:
        merged.update(counter)
    return merged


def top_tokens(counts: Counter, limit: int | None) -> list[tuple[str, int]]:
    """Tokens by descending count; ties keep first-encountered order."""
    if limit is not None and limit <= 0:
        return []
    return counts.most_common(limit)


def word_frequencies(texts: Iterable[str | None], limit: int | None = 20) -> list[tuple[str, int]]:
    return top_tokens(count_words(texts), limit)


def emoji_frequencies(texts: Iterable[str | None], limit: int | None = 10) -> list[tuple[str, int]]:
    return top_tokens(count_emojis(texts), limit)
