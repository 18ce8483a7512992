"""API models for the Lyric Studio backend."""
