"""Utility modules for Lyric Studio."""

from lyric_studio.utils.languages import (
    LANGUAGE_NAMES,
    join_language_codes,
    language_name,
    split_language_codes,
)

__all__ = ["LANGUAGE_NAMES", "language_name", "join_language_codes", "split_language_codes"]
