"""Command-line interface for Lyric Studio."""
