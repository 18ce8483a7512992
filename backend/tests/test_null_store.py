"""Tests for running without a database."""

from collections.abc import Callable, Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from backend.config import BackendSettings
from backend.main import create_app
from backend.services.store import NullLyricStore
from lyric_studio.core.exceptions import DatabaseUnavailableError
from lyric_studio.core.models import User, UserRole


class SignInOnlyStore(NullLyricStore):
    """Lets sign-in through so a route's own write hits the missing database."""

    async def upsert_user(
        self,
        open_id: str,
        name: str | None = None,
        email: str | None = None,
        login_method: str | None = None,
        role: UserRole | None = None,
    ) -> User:
        return User(id=1, open_id=open_id)


@pytest.fixture
def null_store() -> NullLyricStore:
    """Store with no database behind it."""
    return NullLyricStore()


class TestNullLyricStore:
    """Reads come back empty, writes raise."""

    async def test_reads_are_empty(self, null_store: NullLyricStore) -> None:
        """Every read returns nothing."""
        assert await null_store.list_keywords(1) == []
        assert await null_store.list_melodies(1) == []
        assert await null_store.list_lyrics(1) == []
        assert await null_store.get_lyric(1) is None
        assert await null_store.get_preference(1) is None
        assert await null_store.get_user_by_open_id("open-1") is None
        assert await null_store.list_feedback_for_lyric(1) == []
        assert await null_store.list_feedback_for_user(1) == []

    async def test_writes_raise(self, null_store: NullLyricStore) -> None:
        """Writes raise DatabaseUnavailableError."""
        with pytest.raises(DatabaseUnavailableError, match="create lyric"):
            await null_store.create_lyric(user_id=1, content="x", languages="zh", is_mixed=False)
        with pytest.raises(DatabaseUnavailableError):
            await null_store.create_feedback(1, 1, "like")
        with pytest.raises(DatabaseUnavailableError):
            await null_store.upsert_preference(1, "zh", True, "text")
        with pytest.raises(DatabaseUnavailableError):
            await null_store.delete_keyword(1, 1)

    async def test_check(self, null_store: NullLyricStore) -> None:
        """Health check says no database is configured."""
        assert await null_store.check() == "No database configured"


@pytest.fixture
def null_client(
    auth_backend_settings: BackendSettings,
    null_store: NullLyricStore,
    stub_llm: Any,
) -> Generator[TestClient, None, None]:
    """Test client with no database."""
    app = create_app(settings=auth_backend_settings, store=null_store, llm=stub_llm)
    with TestClient(app) as test_client:
        yield test_client


class TestApiWithoutDatabase:
    """API behavior when no database is configured."""

    def test_authenticated_request_returns_503(
        self,
        null_client: TestClient,
        auth_headers: dict[str, str],
    ) -> None:
        """Signing in needs a user write, so it is unavailable."""
        response = null_client.get("/api/lyrics", headers=auth_headers)

        assert response.status_code == 503
        assert "Database not available" in response.json()["detail"]

    def test_me_is_null(self, null_client: TestClient, auth_headers: dict[str, str]) -> None:
        """The identity check degrades to anonymous."""
        response = null_client.get("/api/auth/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() is None

    def test_health_still_works(self, null_client: TestClient) -> None:
        """Health checks do not need the database."""
        response = null_client.get("/api/health")

        assert response.status_code == 200


class TestDatabaseUnavailableHandler:
    """Store errors raised inside routes become 503 responses."""

    def test_write_error_maps_to_503(
        self,
        auth_backend_settings: BackendSettings,
        stub_llm: Any,
        make_auth_headers: Callable[..., dict[str, str]],
    ) -> None:
        """A write that reaches a missing database returns 503."""
        app = create_app(settings=auth_backend_settings, store=SignInOnlyStore(), llm=stub_llm)
        with TestClient(app) as test_client:
            response = test_client.post(
                "/api/keywords",
                json={"keyword": "ocean"},
                headers=make_auth_headers("user-open-id"),
            )

        assert response.status_code == 503
        assert response.json() == {"detail": "Database not available: cannot create keyword"}
