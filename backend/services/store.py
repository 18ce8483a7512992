"""Persistence interface for Lyric Studio records.

The application picks one implementation at startup (see ``create_store``):

- ``FirestoreLyricStore`` for deployed environments
- ``InMemoryLyricStore`` for local runs and tests
- ``NullLyricStore`` when no database is configured: reads come back empty,
  writes raise ``DatabaseUnavailableError``
"""

import itertools
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any, TypeVar

from pydantic import BaseModel

from backend.config import BackendSettings
from lyric_studio.core.exceptions import DatabaseUnavailableError
from lyric_studio.core.models import (
    DEFAULT_WEIGHT,
    FeedbackHistory,
    FeedbackType,
    Keyword,
    Lyric,
    Melody,
    MelodyType,
    TimingEntry,
    User,
    UserPreference,
    UserRole,
    utcnow,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class LyricStore(ABC):
    """Typed CRUD over users, keywords, melodies, lyrics, preferences and feedback.

    Mutations of user-owned records take the caller's ``user_id`` and silently
    ignore records owned by someone else. All list methods return newest first.
    """

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    @abstractmethod
    async def upsert_user(
        self,
        open_id: str,
        name: str | None = None,
        email: str | None = None,
        login_method: str | None = None,
        role: UserRole | None = None,
    ) -> User:
        """Create the user on first sign-in, otherwise refresh it.

        ``last_signed_in`` is always set to now. Fields passed as ``None`` keep
        their stored value.
        """

    @abstractmethod
    async def get_user_by_open_id(self, open_id: str) -> User | None:
        """Look up a user by identity-provider id."""

    # -------------------------------------------------------------------------
    # Keywords
    # -------------------------------------------------------------------------

    @abstractmethod
    async def create_keyword(
        self,
        user_id: int,
        keyword: str,
        search_results: str | None = None,
        weight: float = DEFAULT_WEIGHT,
    ) -> Keyword: ...

    @abstractmethod
    async def list_keywords(self, user_id: int) -> list[Keyword]: ...

    @abstractmethod
    async def update_keyword(self, keyword_id: int, user_id: int, updates: dict[str, Any]) -> bool:
        """Apply field updates. Returns False if the keyword was not found."""

    @abstractmethod
    async def delete_keyword(self, keyword_id: int, user_id: int) -> None: ...

    # -------------------------------------------------------------------------
    # Melodies
    # -------------------------------------------------------------------------

    @abstractmethod
    async def create_melody(
        self,
        user_id: int,
        description: str,
        melody_type: MelodyType,
        melody_data: str | None = None,
        weight: float = DEFAULT_WEIGHT,
    ) -> Melody: ...

    @abstractmethod
    async def list_melodies(self, user_id: int) -> list[Melody]: ...

    @abstractmethod
    async def update_melody(self, melody_id: int, user_id: int, updates: dict[str, Any]) -> bool:
        """Apply field updates. Returns False if the melody was not found."""

    @abstractmethod
    async def delete_melody(self, melody_id: int, user_id: int) -> None: ...

    # -------------------------------------------------------------------------
    # Lyrics
    # -------------------------------------------------------------------------

    @abstractmethod
    async def create_lyric(
        self,
        user_id: int,
        content: str,
        languages: str,
        is_mixed: bool,
        title: str | None = None,
        translation: str | None = None,
        keyword_ids: list[int] | None = None,
        melody_id: int | None = None,
        timing_data: list[TimingEntry] | None = None,
    ) -> Lyric:
        """Store a new lyric with a zero score and default weight."""

    @abstractmethod
    async def list_lyrics(self, user_id: int) -> list[Lyric]: ...

    @abstractmethod
    async def get_lyric(self, lyric_id: int) -> Lyric | None:
        """Look up a lyric by id, regardless of owner."""

    @abstractmethod
    async def update_lyric(
        self,
        lyric_id: int,
        updates: dict[str, Any],
        user_id: int | None = None,
    ) -> bool:
        """Apply field updates.

        When ``user_id`` is given the lyric must belong to that user.
        Returns False if no matching lyric was found.
        """

    @abstractmethod
    async def delete_lyric(self, lyric_id: int, user_id: int) -> None: ...

    # -------------------------------------------------------------------------
    # Preferences
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_preference(self, user_id: int) -> UserPreference | None: ...

    @abstractmethod
    async def upsert_preference(
        self,
        user_id: int,
        preferred_languages: str,
        allow_mixed_language: bool,
        default_melody_type: str,
    ) -> UserPreference:
        """Create or replace the user's single preference record."""

    # -------------------------------------------------------------------------
    # Feedback
    # -------------------------------------------------------------------------

    @abstractmethod
    async def create_feedback(
        self,
        user_id: int,
        lyric_id: int,
        feedback_type: FeedbackType,
        comment: str | None = None,
    ) -> FeedbackHistory: ...

    @abstractmethod
    async def list_feedback_for_lyric(self, lyric_id: int, user_id: int | None = None) -> list[FeedbackHistory]:
        """Feedback on a lyric, optionally limited to one user's entries."""

    @abstractmethod
    async def list_feedback_for_user(self, user_id: int) -> list[FeedbackHistory]: ...

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    @abstractmethod
    async def check(self) -> str:
        """Verify connectivity and return a short status message."""


def _newest_first(records: list[RecordT]) -> list[RecordT]:
    return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)  # type: ignore[attr-defined]


class InMemoryLyricStore(LyricStore):
    """Process-local store backed by dicts."""

    def __init__(self) -> None:
        self._tables: dict[str, dict[int, Any]] = {
            "users": {},
            "keywords": {},
            "melodies": {},
            "lyrics": {},
            "preferences": {},
            "feedback": {},
        }
        self._ids: dict[str, Iterator[int]] = {name: itertools.count(1) for name in self._tables}

    def _insert(self, table: str, model: type[RecordT], **fields: Any) -> RecordT:
        now = utcnow()
        record_id = next(self._ids[table])
        record_fields = {"id": record_id, "created_at": now, **fields}
        if "updated_at" in model.model_fields:
            record_fields["updated_at"] = now
        record = model(**record_fields)
        self._tables[table][record_id] = record
        return record

    def _owned(self, table: str, record_id: int, user_id: int | None) -> Any | None:
        record = self._tables[table].get(record_id)
        if record is None or (user_id is not None and record.user_id != user_id):
            return None
        return record

    def _update(self, table: str, record_id: int, user_id: int | None, updates: dict[str, Any]) -> bool:
        record = self._owned(table, record_id, user_id)
        if record is None:
            return False
        self._tables[table][record_id] = record.model_copy(update={**updates, "updated_at": utcnow()})
        return True

    def _delete(self, table: str, record_id: int, user_id: int) -> None:
        if self._owned(table, record_id, user_id) is not None:
            del self._tables[table][record_id]

    def _list(self, table: str, **filters: Any) -> list[Any]:
        records = [
            record
            for record in self._tables[table].values()
            if all(getattr(record, field) == value for field, value in filters.items())
        ]
        return _newest_first(records)

    async def upsert_user(
        self,
        open_id: str,
        name: str | None = None,
        email: str | None = None,
        login_method: str | None = None,
        role: UserRole | None = None,
    ) -> User:
        now = utcnow()
        optional = {"name": name, "email": email, "login_method": login_method, "role": role}
        provided = {field: value for field, value in optional.items() if value is not None}

        existing = await self.get_user_by_open_id(open_id)
        if existing is None:
            return self._insert("users", User, open_id=open_id, last_signed_in=now, **provided)

        updated = existing.model_copy(update={**provided, "last_signed_in": now, "updated_at": now})
        self._tables["users"][existing.id] = updated
        return updated

    async def get_user_by_open_id(self, open_id: str) -> User | None:
        for user in self._tables["users"].values():
            if user.open_id == open_id:
                return user  # type: ignore[no-any-return]
        return None

    async def create_keyword(
        self,
        user_id: int,
        keyword: str,
        search_results: str | None = None,
        weight: float = DEFAULT_WEIGHT,
    ) -> Keyword:
        return self._insert("keywords", Keyword, user_id=user_id, keyword=keyword, search_results=search_results, weight=weight)

    async def list_keywords(self, user_id: int) -> list[Keyword]:
        return self._list("keywords", user_id=user_id)

    async def update_keyword(self, keyword_id: int, user_id: int, updates: dict[str, Any]) -> bool:
        return self._update("keywords", keyword_id, user_id, updates)

    async def delete_keyword(self, keyword_id: int, user_id: int) -> None:
        self._delete("keywords", keyword_id, user_id)

    async def create_melody(
        self,
        user_id: int,
        description: str,
        melody_type: MelodyType,
        melody_data: str | None = None,
        weight: float = DEFAULT_WEIGHT,
    ) -> Melody:
        return self._insert(
            "melodies",
            Melody,
            user_id=user_id,
            description=description,
            melody_type=melody_type,
            melody_data=melody_data,
            weight=weight,
        )

    async def list_melodies(self, user_id: int) -> list[Melody]:
        return self._list("melodies", user_id=user_id)

    async def update_melody(self, melody_id: int, user_id: int, updates: dict[str, Any]) -> bool:
        return self._update("melodies", melody_id, user_id, updates)

    async def delete_melody(self, melody_id: int, user_id: int) -> None:
        self._delete("melodies", melody_id, user_id)

    async def create_lyric(
        self,
        user_id: int,
        content: str,
        languages: str,
        is_mixed: bool,
        title: str | None = None,
        translation: str | None = None,
        keyword_ids: list[int] | None = None,
        melody_id: int | None = None,
        timing_data: list[TimingEntry] | None = None,
    ) -> Lyric:
        return self._insert(
            "lyrics",
            Lyric,
            user_id=user_id,
            title=title,
            content=content,
            languages=languages,
            is_mixed=is_mixed,
            translation=translation,
            keyword_ids=keyword_ids,
            melody_id=melody_id,
            timing_data=timing_data,
        )

    async def list_lyrics(self, user_id: int) -> list[Lyric]:
        return self._list("lyrics", user_id=user_id)

    async def get_lyric(self, lyric_id: int) -> Lyric | None:
        return self._tables["lyrics"].get(lyric_id)

    async def update_lyric(
        self,
        lyric_id: int,
        updates: dict[str, Any],
        user_id: int | None = None,
    ) -> bool:
        return self._update("lyrics", lyric_id, user_id, updates)

    async def delete_lyric(self, lyric_id: int, user_id: int) -> None:
        self._delete("lyrics", lyric_id, user_id)

    async def get_preference(self, user_id: int) -> UserPreference | None:
        for preference in self._tables["preferences"].values():
            if preference.user_id == user_id:
                return preference  # type: ignore[no-any-return]
        return None

    async def upsert_preference(
        self,
        user_id: int,
        preferred_languages: str,
        allow_mixed_language: bool,
        default_melody_type: str,
    ) -> UserPreference:
        fields = {
            "preferred_languages": preferred_languages,
            "allow_mixed_language": allow_mixed_language,
            "default_melody_type": default_melody_type,
        }

        existing = await self.get_preference(user_id)
        if existing is None:
            return self._insert("preferences", UserPreference, user_id=user_id, **fields)

        self._update("preferences", existing.id, user_id, fields)
        return self._tables["preferences"][existing.id]  # type: ignore[no-any-return]

    async def create_feedback(
        self,
        user_id: int,
        lyric_id: int,
        feedback_type: FeedbackType,
        comment: str | None = None,
    ) -> FeedbackHistory:
        return self._insert(
            "feedback",
            FeedbackHistory,
            user_id=user_id,
            lyric_id=lyric_id,
            feedback_type=feedback_type,
            comment=comment,
        )

    async def list_feedback_for_lyric(self, lyric_id: int, user_id: int | None = None) -> list[FeedbackHistory]:
        if user_id is None:
            return self._list("feedback", lyric_id=lyric_id)
        return self._list("feedback", lyric_id=lyric_id, user_id=user_id)

    async def list_feedback_for_user(self, user_id: int) -> list[FeedbackHistory]:
        return self._list("feedback", user_id=user_id)

    async def check(self) -> str:
        return f"In-memory store, {len(self._tables['lyrics'])} lyrics"


class NullLyricStore(LyricStore):
    """Store used when no database is configured.

    Reads return nothing; writes raise because silently dropping them would
    mislead the caller.
    """

    def _unavailable(self, operation: str) -> DatabaseUnavailableError:
        logger.warning(f"Cannot {operation}: database not available")
        return DatabaseUnavailableError(operation)

    async def upsert_user(
        self,
        open_id: str,
        name: str | None = None,
        email: str | None = None,
        login_method: str | None = None,
        role: UserRole | None = None,
    ) -> User:
        raise self._unavailable("upsert user")

    async def get_user_by_open_id(self, open_id: str) -> User | None:
        return None

    async def create_keyword(
        self,
        user_id: int,
        keyword: str,
        search_results: str | None = None,
        weight: float = DEFAULT_WEIGHT,
    ) -> Keyword:
        raise self._unavailable("create keyword")

    async def list_keywords(self, user_id: int) -> list[Keyword]:
        return []

    async def update_keyword(self, keyword_id: int, user_id: int, updates: dict[str, Any]) -> bool:
        raise self._unavailable("update keyword")

    async def delete_keyword(self, keyword_id: int, user_id: int) -> None:
        raise self._unavailable("delete keyword")

    async def create_melody(
        self,
        user_id: int,
        description: str,
        melody_type: MelodyType,
        melody_data: str | None = None,
        weight: float = DEFAULT_WEIGHT,
    ) -> Melody:
        raise self._unavailable("create melody")

    async def list_melodies(self, user_id: int) -> list[Melody]:
        return []

    async def update_melody(self, melody_id: int, user_id: int, updates: dict[str, Any]) -> bool:
        raise self._unavailable("update melody")

    async def delete_melody(self, melody_id: int, user_id: int) -> None:
        raise self._unavailable("delete melody")

    async def create_lyric(
        self,
        user_id: int,
        content: str,
        languages: str,
        is_mixed: bool,
        title: str | None = None,
        translation: str | None = None,
        keyword_ids: list[int] | None = None,
        melody_id: int | None = None,
        timing_data: list[TimingEntry] | None = None,
    ) -> Lyric:
        raise self._unavailable("create lyric")

    async def list_lyrics(self, user_id: int) -> list[Lyric]:
        return []

    async def get_lyric(self, lyric_id: int) -> Lyric | None:
        return None

    async def update_lyric(
        self,
        lyric_id: int,
        updates: dict[str, Any],
        user_id: int | None = None,
    ) -> bool:
        raise self._unavailable("update lyric")

    async def delete_lyric(self, lyric_id: int, user_id: int) -> None:
        raise self._unavailable("delete lyric")

    async def get_preference(self, user_id: int) -> UserPreference | None:
        return None

    async def upsert_preference(
        self,
        user_id: int,
        preferred_languages: str,
        allow_mixed_language: bool,
        default_melody_type: str,
    ) -> UserPreference:
        raise self._unavailable("upsert preference")

    async def create_feedback(
        self,
        user_id: int,
        lyric_id: int,
        feedback_type: FeedbackType,
        comment: str | None = None,
    ) -> FeedbackHistory:
        raise self._unavailable("create feedback")

    async def list_feedback_for_lyric(self, lyric_id: int, user_id: int | None = None) -> list[FeedbackHistory]:
        return []

    async def list_feedback_for_user(self, user_id: int) -> list[FeedbackHistory]:
        return []

    async def check(self) -> str:
        return "No database configured"


def create_store(settings: BackendSettings) -> LyricStore:
    """Build the store selected by ``settings.database_backend``."""
    if settings.database_backend == "firestore":
        from backend.services.firestore_store import FirestoreLyricStore

        logger.info(f"Using Firestore store (project={settings.google_cloud_project or 'default'})")
        return FirestoreLyricStore(settings)

    if settings.database_backend == "memory":
        logger.info("Using in-memory store")
        return InMemoryLyricStore()

    logger.warning("No database configured; writes will fail")
    return NullLyricStore()
