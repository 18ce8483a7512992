"""Tests for backend configuration."""

import os
from unittest.mock import patch

from backend.config import BackendSettings, get_backend_settings


class TestBackendSettings:
    """Tests for BackendSettings class."""

    def test_inherits_from_settings(self) -> None:
        """Test that BackendSettings inherits from base Settings."""
        settings = BackendSettings()
        # Should have base Settings attributes
        assert hasattr(settings, "environment")
        assert hasattr(settings, "database_backend")

    def test_default_session_cookie(self) -> None:
        """Test default session cookie name."""
        settings = BackendSettings()
        assert settings.session_cookie_name == "lyric_studio_session"

    def test_default_cors_origins(self) -> None:
        """Test default CORS origins."""
        settings = BackendSettings()
        assert settings.cors_allow_origins == ["http://localhost:3000"]

    def test_custom_cookie_name(self) -> None:
        """Test custom cookie name from environment."""
        with patch.dict(os.environ, {"SESSION_COOKIE_NAME": "sid"}):
            settings = BackendSettings()
            assert settings.session_cookie_name == "sid"

    def test_cors_origins_from_json_env(self) -> None:
        """List settings are parsed from JSON."""
        with patch.dict(os.environ, {"CORS_ALLOW_ORIGINS": '["https://a.example", "https://b.example"]'}):
            settings = BackendSettings()
            assert settings.cors_allow_origins == ["https://a.example", "https://b.example"]


class TestGetBackendSettings:
    """Tests for get_backend_settings function."""

    def test_returns_backend_settings(self) -> None:
        """Test get_backend_settings returns BackendSettings instance."""
        get_backend_settings.cache_clear()
        settings = get_backend_settings()
        assert isinstance(settings, BackendSettings)

    def test_is_cached(self) -> None:
        """Test get_backend_settings returns the same instance."""
        get_backend_settings.cache_clear()
        assert get_backend_settings() is get_backend_settings()
