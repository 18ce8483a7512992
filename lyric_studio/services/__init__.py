"""External service clients for Lyric Studio."""
