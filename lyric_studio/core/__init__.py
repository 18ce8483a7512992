"""Core modules for Lyric Studio."""

from lyric_studio.core.config import Settings, get_settings
from lyric_studio.core.models import (
    FeedbackHistory,
    Keyword,
    Lyric,
    Melody,
    TimingEntry,
    User,
    UserPreference,
)

__all__ = [
    "Settings",
    "get_settings",
    "User",
    "Keyword",
    "Melody",
    "Lyric",
    "TimingEntry",
    "UserPreference",
    "FeedbackHistory",
]
