"""Custom exceptions for Lyric Studio."""


class LyricStudioError(Exception):
    """Base exception for all Lyric Studio errors."""

    pass


class AuthenticationError(LyricStudioError):
    """Authentication failed."""

    pass


class ExternalServiceError(LyricStudioError):
    """External service (LLM provider, database, etc.) failed."""

    def __init__(self, service: str, message: str):
        self.service = service
        super().__init__(f"{service}: {message}")


class GenerationError(LyricStudioError):
    """Lyric generation failed and has no degraded fallback."""

    def __init__(self, message: str = "Failed to generate lyrics. Please try again."):
        super().__init__(message)


class DatabaseUnavailableError(LyricStudioError):
    """No database is configured, so the write cannot be performed."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Database not available: cannot {operation}")
