"""Descriptive statistics over a copy of the macOS Messages database."""

from chat_stats.config import StatsConfig
from chat_stats.exceptions import ChatStatsError
from chat_stats.stats.engine import StatsEngine

__version__ = "0.1.0"

__all__ = [
    "StatsConfig",
    "StatsEngine",
    "ChatStatsError",
]
