"""Configuration management for Lyric Studio."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Persistence ("none" runs without a database: reads are empty, writes fail)
    database_backend: Literal["firestore", "memory", "none"] = "memory"
    google_cloud_project: str = ""
    firestore_database: str = "(default)"
    firestore_emulator_host: str | None = None

    # LLM (OpenAI-compatible chat completions endpoint)
    llm_api_url: str = "https://api.openai.com/v1"
    llm_api_key: str = ""
    llm_model: str = "gpt-4o-mini"
    llm_timeout_seconds: float = 120.0
    parallel_keyword_expansion: bool = False

    # JWT session tokens
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_expiration_hours: int = 24 * 7  # 1 week

    # Identity of the owner account, promoted to admin on sign-in
    owner_open_id: str = ""

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def is_emulated(self) -> bool:
        """Check if using the Firestore emulator."""
        return self.firestore_emulator_host is not None

    @property
    def llm_configured(self) -> bool:
        """Check if an LLM API key is available."""
        return bool(self.llm_api_key)

    @property
    def api_base_url(self) -> str:
        """Get the API base URL."""
        return f"http://{self.api_host}:{self.api_port}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
