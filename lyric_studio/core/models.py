"""Core data models for Lyric Studio."""

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

UserRole = Literal["user", "admin"]
MelodyType = Literal["text", "pattern", "other"]
FeedbackType = Literal["like", "dislike", "neutral"]

# Bounds shared by every weight field and the lyric satisfaction score
MIN_WEIGHT = 0.1
MAX_WEIGHT = 2.0
DEFAULT_WEIGHT = 1.0
MIN_SATISFACTION_SCORE = -10
MAX_SATISFACTION_SCORE = 10


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class User(BaseModel):
    """User account, keyed by the identity provider's open id."""

    id: int
    open_id: str
    name: str | None = None
    email: str | None = None
    login_method: str | None = None
    role: UserRole = "user"
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    last_signed_in: datetime = Field(default_factory=utcnow)


class Keyword(BaseModel):
    """User-owned keyword with optional cached search results."""

    id: int
    user_id: int
    keyword: str
    search_results: str | None = None  # Raw payload, usually JSON text
    weight: float = DEFAULT_WEIGHT
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Melody(BaseModel):
    """User-owned melody description."""

    id: int
    user_id: int
    description: str
    melody_type: MelodyType
    melody_data: str | None = None
    weight: float = DEFAULT_WEIGHT
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class TimingEntry(BaseModel):
    """Display timing for one lyric line, in milliseconds."""

    line: str
    start_time: float = Field(..., ge=0)
    duration: float = Field(..., ge=0)


class Lyric(BaseModel):
    """Generated (or hand-written) song lyrics with feedback state."""

    id: int
    user_id: int
    title: str | None = None
    content: str
    languages: str  # Comma-separated codes: "zh,en,ja"
    is_mixed: bool = False
    translation: str | None = None  # Chinese translation for non-Chinese lyrics
    keyword_ids: list[int] | None = None
    melody_id: int | None = None
    timing_data: list[TimingEntry] | None = None
    satisfaction_score: int = Field(0, ge=MIN_SATISFACTION_SCORE, le=MAX_SATISFACTION_SCORE)
    weight: float = Field(DEFAULT_WEIGHT, ge=MIN_WEIGHT, le=MAX_WEIGHT)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def language_codes(self) -> list[str]:
        """Language codes as a list."""
        return [code for code in self.languages.split(",") if code]


class UserPreference(BaseModel):
    """Per-user generation defaults. One record per user."""

    id: int
    user_id: int
    preferred_languages: str = "zh"
    allow_mixed_language: bool = True
    default_melody_type: str = "text"
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class FeedbackHistory(BaseModel):
    """Append-only record of one feedback event on a lyric."""

    id: int
    user_id: int
    lyric_id: int
    feedback_type: FeedbackType
    comment: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
