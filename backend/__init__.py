"""Lyric Studio HTTP backend."""
