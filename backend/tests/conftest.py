"""Shared test fixtures for backend tests."""

import json
from collections.abc import Callable, Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from backend.config import BackendSettings
from backend.main import create_app
from backend.services.auth_service import AuthService
from backend.services.store import InMemoryLyricStore
from lyric_studio.core.exceptions import ExternalServiceError
from lyric_studio.services.llm import LLMResponse
from lyric_studio.services.lyric_generator import (
    EXPAND_SYSTEM_PROMPT,
    LYRICIST_SYSTEM_PROMPT,
    TRANSLATOR_SYSTEM_PROMPT,
)

SAMPLE_LYRIC_JSON = json.dumps(
    {
        "title": "Harbor Lights",
        "lyrics": "Verse one line\nChorus line",
        "timingData": [
            {"line": "Verse one line", "startTime": 0, "duration": 3000},
            {"line": "Chorus line", "startTime": 3000, "duration": 2500},
        ],
    }
)


class StubLLM:
    """Chat backend that answers by system prompt and records every call."""

    def __init__(self, lyric_content: Any = SAMPLE_LYRIC_JSON, fail_lyrics: bool = False):
        self.lyric_content = lyric_content
        self.fail_lyrics = fail_lyrics
        self.calls: list[list[dict[str, str]]] = []

    async def invoke(
        self,
        messages: list[dict[str, str]],
        response_format: dict[str, Any] | None = None,
    ) -> LLMResponse:
        self.calls.append(messages)
        system = messages[0]["content"]
        user = messages[-1]["content"]

        if system == EXPAND_SYSTEM_PROMPT:
            keyword = user.rsplit(": ", 1)[-1]
            return LLMResponse(content=f"{keyword} expanded")
        if system == LYRICIST_SYSTEM_PROMPT:
            if self.fail_lyrics:
                raise ExternalServiceError("LLM", "boom")
            return LLMResponse(content=self.lyric_content)
        if system == TRANSLATOR_SYSTEM_PROMPT:
            return LLMResponse(content="中文翻译")
        raise AssertionError(f"Unexpected system prompt: {system}")

    def prompts_for(self, system_prompt: str) -> list[list[dict[str, str]]]:
        return [call for call in self.calls if call[0]["content"] == system_prompt]


@pytest.fixture
def auth_backend_settings() -> BackendSettings:
    """Create backend settings with JWT secret for auth testing."""
    return BackendSettings(
        environment="development",
        database_backend="memory",
        google_cloud_project="test-project",
        jwt_secret="test-jwt-secret-key-for-testing-only",
        jwt_algorithm="HS256",
        jwt_expiration_hours=24,
        llm_api_key="test-llm-key",
        owner_open_id="owner-open-id",
    )


@pytest.fixture
def store() -> InMemoryLyricStore:
    """Fresh in-memory store."""
    return InMemoryLyricStore()


@pytest.fixture
def stub_llm() -> StubLLM:
    """LLM stub with canned responses."""
    return StubLLM()


@pytest.fixture
def client(
    auth_backend_settings: BackendSettings,
    store: InMemoryLyricStore,
    stub_llm: StubLLM,
) -> Generator[TestClient, None, None]:
    """Create test client wired to the in-memory store and stub LLM."""
    app = create_app(settings=auth_backend_settings, store=store, llm=stub_llm)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_auth_headers(auth_backend_settings: BackendSettings) -> Callable[..., dict[str, str]]:
    """Factory for Bearer headers carrying a session token for an open id."""

    def _make(open_id: str, name: str | None = None) -> dict[str, str]:
        token, _ = AuthService(auth_backend_settings, InMemoryLyricStore()).generate_jwt(open_id, name=name)
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def auth_headers(make_auth_headers: Callable[..., dict[str, str]]) -> dict[str, str]:
    """Auth headers for the primary test user."""
    return make_auth_headers("user-open-id", name="Test User")


@pytest.fixture
def other_auth_headers(make_auth_headers: Callable[..., dict[str, str]]) -> dict[str, str]:
    """Auth headers for a second, unrelated user."""
    return make_auth_headers("other-open-id", name="Other User")
