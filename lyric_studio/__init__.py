"""Lyric Studio - multilingual lyric generation with feedback-weighted scoring."""

__version__ = "0.1.0"
