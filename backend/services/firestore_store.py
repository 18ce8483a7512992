"""Firestore implementation of the lyric store.

Records are stored one document per row. Integer ids come from a per-collection
counter document updated in a transaction. Timestamps are stored as ISO-8601
strings so they order correctly as plain strings.
"""

import hashlib
import logging
from typing import Any

from google.api_core.exceptions import AlreadyExists, NotFound
from google.cloud import firestore

from backend.config import BackendSettings
from backend.services.store import LyricStore, RecordT
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


@firestore.async_transactional
async def _next_counter_value(
    transaction: firestore.AsyncTransaction,
    counter_ref: firestore.AsyncDocumentReference,
) -> int:
    """Increment a counter document and return the new value."""
    snapshot = await counter_ref.get(transaction=transaction)
    current = snapshot.get("value") if snapshot.exists else 0
    next_value = int(current) + 1
    transaction.set(counter_ref, {"value": next_value})
    return next_value


class FirestoreLyricStore(LyricStore):
    """Lyric store backed by Cloud Firestore."""

    USERS_COLLECTION = "users"
    KEYWORDS_COLLECTION = "keywords"
    MELODIES_COLLECTION = "melodies"
    LYRICS_COLLECTION = "lyrics"
    PREFERENCES_COLLECTION = "user_preferences"
    FEEDBACK_COLLECTION = "feedback_history"
    COUNTERS_COLLECTION = "counters"

    def __init__(self, settings: BackendSettings):
        self.settings = settings
        self._client: firestore.AsyncClient | None = None

    @property
    def client(self) -> firestore.AsyncClient:
        """Get or create the Firestore client."""
        if self._client is None:
            self._client = firestore.AsyncClient(
                project=self.settings.google_cloud_project or None,
                database=self.settings.firestore_database,
            )
        return self._client

    def collection(self, name: str) -> firestore.AsyncCollectionReference:
        """Get a collection reference."""
        return self.client.collection(name)

    # -------------------------------------------------------------------------
    # Document helpers
    # -------------------------------------------------------------------------

    async def _allocate_id(self, collection: str) -> int:
        counter_ref = self.collection(self.COUNTERS_COLLECTION).document(collection)
        return await _next_counter_value(self.client.transaction(), counter_ref)

    async def _get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        doc = await self.collection(collection).document(doc_id).get()
        if doc.exists:
            return doc.to_dict()
        return None

    async def _insert(self, collection: str, model: type[RecordT], **fields: Any) -> RecordT:
        now = utcnow()
        record_id = await self._allocate_id(collection)
        record_fields = {"id": record_id, "created_at": now, **fields}
        if "updated_at" in model.model_fields:
            record_fields["updated_at"] = now
        record = model(**record_fields)

        await self.collection(collection).document(str(record_id)).set(record.model_dump(mode="json"))
        return record

    async def _update(
        self,
        collection: str,
        record_id: int,
        user_id: int | None,
        updates: dict[str, Any],
    ) -> bool:
        doc_id = str(record_id)
        existing = await self._get(collection, doc_id)
        if existing is None or (user_id is not None and existing.get("user_id") != user_id):
            return False

        data = {field: _to_document_value(value) for field, value in updates.items()}
        data["updated_at"] = utcnow().isoformat()
        try:
            await self.collection(collection).document(doc_id).update(data)
        except NotFound:
            return False
        return True

    async def _delete(self, collection: str, record_id: int, user_id: int) -> None:
        doc_id = str(record_id)
        existing = await self._get(collection, doc_id)
        if existing is None or existing.get("user_id") != user_id:
            return
        await self.collection(collection).document(doc_id).delete()

    async def _query(
        self,
        collection: str,
        filters: list[tuple[str, str, Any]],
    ) -> list[dict[str, Any]]:
        query = self.collection(collection)
        for field, op, value in filters:
            query = query.where(field, op, value)
        query = query.order_by("created_at", direction=firestore.Query.DESCENDING)
        query = query.order_by("id", direction=firestore.Query.DESCENDING)

        docs = []
        async for doc in query.stream():
            docs.append(doc.to_dict())
        return docs

    @staticmethod
    def _user_doc_id(open_id: str) -> str:
        """Users are keyed by a hash of their open id so lookups need no query."""
        return hashlib.sha256(open_id.encode()).hexdigest()

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    async def upsert_user(
        self,
        open_id: str,
        name: str | None = None,
        email: str | None = None,
        login_method: str | None = None,
        role: UserRole | None = None,
    ) -> User:
        now = utcnow()
        doc_id = self._user_doc_id(open_id)
        optional = {"name": name, "email": email, "login_method": login_method, "role": role}
        provided = {field: value for field, value in optional.items() if value is not None}

        existing = await self._get(self.USERS_COLLECTION, doc_id)
        while existing is None:
            user = User(
                id=await self._allocate_id(self.USERS_COLLECTION),
                open_id=open_id,
                created_at=now,
                updated_at=now,
                last_signed_in=now,
                **provided,
            )
            try:
                await self.collection(self.USERS_COLLECTION).document(doc_id).create(user.model_dump(mode="json"))
            except AlreadyExists:
                # A concurrent first sign-in won; its id is the user's id
                logger.info(f"User for open id hash {doc_id[:12]} created concurrently, updating instead")
                existing = await self._get(self.USERS_COLLECTION, doc_id)
                continue
            logger.info(f"Created user {user.id}")
            return user

        update_data: dict[str, Any] = {
            **provided,
            "last_signed_in": now.isoformat(),
            "updated_at": now.isoformat(),
        }
        await self.collection(self.USERS_COLLECTION).document(doc_id).update(update_data)
        return User.model_validate({**existing, **update_data})

    async def get_user_by_open_id(self, open_id: str) -> User | None:
        doc = await self._get(self.USERS_COLLECTION, self._user_doc_id(open_id))
        return User.model_validate(doc) if doc else None

    # -------------------------------------------------------------------------
    # Keywords
    # -------------------------------------------------------------------------

    async def create_keyword(
        self,
        user_id: int,
        keyword: str,
        search_results: str | None = None,
        weight: float = DEFAULT_WEIGHT,
    ) -> Keyword:
        return await self._insert(
            self.KEYWORDS_COLLECTION,
            Keyword,
            user_id=user_id,
            keyword=keyword,
            search_results=search_results,
            weight=weight,
        )

    async def list_keywords(self, user_id: int) -> list[Keyword]:
        docs = await self._query(self.KEYWORDS_COLLECTION, [("user_id", "==", user_id)])
        return [Keyword.model_validate(doc) for doc in docs]

    async def update_keyword(self, keyword_id: int, user_id: int, updates: dict[str, Any]) -> bool:
        return await self._update(self.KEYWORDS_COLLECTION, keyword_id, user_id, updates)

    async def delete_keyword(self, keyword_id: int, user_id: int) -> None:
        await self._delete(self.KEYWORDS_COLLECTION, keyword_id, user_id)

    # -------------------------------------------------------------------------
    # Melodies
    # -------------------------------------------------------------------------

    async def create_melody(
        self,
        user_id: int,
        description: str,
        melody_type: MelodyType,
        melody_data: str | None = None,
        weight: float = DEFAULT_WEIGHT,
    ) -> Melody:
        return await self._insert(
            self.MELODIES_COLLECTION,
            Melody,
            user_id=user_id,
            description=description,
            melody_type=melody_type,
            melody_data=melody_data,
            weight=weight,
        )

    async def list_melodies(self, user_id: int) -> list[Melody]:
        docs = await self._query(self.MELODIES_COLLECTION, [("user_id", "==", user_id)])
        return [Melody.model_validate(doc) for doc in docs]

    async def update_melody(self, melody_id: int, user_id: int, updates: dict[str, Any]) -> bool:
        return await self._update(self.MELODIES_COLLECTION, melody_id, user_id, updates)

    async def delete_melody(self, melody_id: int, user_id: int) -> None:
        await self._delete(self.MELODIES_COLLECTION, melody_id, user_id)

    # -------------------------------------------------------------------------
    # Lyrics
    # -------------------------------------------------------------------------

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
        return await self._insert(
            self.LYRICS_COLLECTION,
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
        docs = await self._query(self.LYRICS_COLLECTION, [("user_id", "==", user_id)])
        return [Lyric.model_validate(doc) for doc in docs]

    async def get_lyric(self, lyric_id: int) -> Lyric | None:
        doc = await self._get(self.LYRICS_COLLECTION, str(lyric_id))
        return Lyric.model_validate(doc) if doc else None

    async def update_lyric(
        self,
        lyric_id: int,
        updates: dict[str, Any],
        user_id: int | None = None,
    ) -> bool:
        return await self._update(self.LYRICS_COLLECTION, lyric_id, user_id, updates)

    async def delete_lyric(self, lyric_id: int, user_id: int) -> None:
        await self._delete(self.LYRICS_COLLECTION, lyric_id, user_id)

    # -------------------------------------------------------------------------
    # Preferences (document id is the user id, so there is one per user)
    # -------------------------------------------------------------------------

    async def get_preference(self, user_id: int) -> UserPreference | None:
        doc = await self._get(self.PREFERENCES_COLLECTION, str(user_id))
        return UserPreference.model_validate(doc) if doc else None

    async def upsert_preference(
        self,
        user_id: int,
        preferred_languages: str,
        allow_mixed_language: bool,
        default_melody_type: str,
    ) -> UserPreference:
        now = utcnow()
        existing = await self.get_preference(user_id)

        preference = UserPreference(
            id=existing.id if existing else await self._allocate_id(self.PREFERENCES_COLLECTION),
            user_id=user_id,
            preferred_languages=preferred_languages,
            allow_mixed_language=allow_mixed_language,
            default_melody_type=default_melody_type,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        await self.collection(self.PREFERENCES_COLLECTION).document(str(user_id)).set(preference.model_dump(mode="json"))
        return preference

    # -------------------------------------------------------------------------
    # Feedback
    # -------------------------------------------------------------------------

    async def create_feedback(
        self,
        user_id: int,
        lyric_id: int,
        feedback_type: FeedbackType,
        comment: str | None = None,
    ) -> FeedbackHistory:
        return await self._insert(
            self.FEEDBACK_COLLECTION,
            FeedbackHistory,
            user_id=user_id,
            lyric_id=lyric_id,
            feedback_type=feedback_type,
            comment=comment,
        )

    async def list_feedback_for_lyric(self, lyric_id: int, user_id: int | None = None) -> list[FeedbackHistory]:
        filters: list[tuple[str, str, Any]] = [("lyric_id", "==", lyric_id)]
        if user_id is not None:
            filters.append(("user_id", "==", user_id))
        docs = await self._query(self.FEEDBACK_COLLECTION, filters)
        return [FeedbackHistory.model_validate(doc) for doc in docs]

    async def list_feedback_for_user(self, user_id: int) -> list[FeedbackHistory]:
        docs = await self._query(self.FEEDBACK_COLLECTION, [("user_id", "==", user_id)])
        return [FeedbackHistory.model_validate(doc) for doc in docs]

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    async def check(self) -> str:
        result = await self.collection(self.USERS_COLLECTION).count().get()
        count = result[0][0].value
        return f"Connected, {count} users in database"


def _to_document_value(value: Any) -> Any:
    """Convert pydantic models (and lists of them) to plain Firestore values."""
    if isinstance(value, list):
        return [_to_document_value(item) for item in value]
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    return value
