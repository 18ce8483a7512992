"""Backend-specific configuration."""

from functools import lru_cache

from lyric_studio.core.config import Settings


class BackendSettings(Settings):
    """Extended settings for the backend API."""

    # Session cookie carrying the JWT when no Authorization header is sent
    session_cookie_name: str = "lyric_studio_session"

    # CORS
    cors_allow_origins: list[str] = ["http://localhost:3000"]


@lru_cache
def get_backend_settings() -> BackendSettings:
    """Get cached backend settings instance."""
    return BackendSettings()
