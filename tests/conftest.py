"""Shared test fixtures for Lyric Studio."""

import json
from typing import Any

import pytest

from lyric_studio.core.config import Settings
from lyric_studio.services.llm import LLMResponse


class ScriptedLLM:
    """Chat backend that replays queued responses and records calls.

    Each queued item is either content to return or an exception to raise.
    """

    def __init__(self, responses: list[Any] | None = None):
        self.responses = list(responses or [])
        self.calls: list[dict[str, Any]] = []

    async def invoke(
        self,
        messages: list[dict[str, str]],
        response_format: dict[str, Any] | None = None,
    ) -> LLMResponse:
        self.calls.append({"messages": messages, "response_format": response_format})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return LLMResponse(content=item)


@pytest.fixture
def llm_settings() -> Settings:
    """Settings with an LLM key configured."""
    return Settings(
        llm_api_url="https://llm.example.com/v1/",
        llm_api_key="test-key",
        llm_model="test-model",
        llm_timeout_seconds=5,
    )


@pytest.fixture
def scripted_llm() -> ScriptedLLM:
    """Empty scripted LLM; tests queue responses on ``.responses``."""
    return ScriptedLLM()


@pytest.fixture
def lyric_json() -> str:
    """A well-formed structured lyric response."""
    return json.dumps(
        {
            "title": "City Rain",
            "lyrics": "Rain on the glass\nNeon in the puddles",
            "timingData": [
                {"line": "Rain on the glass", "startTime": 0, "duration": 2800},
                {"line": "Neon in the puddles", "startTime": 2800, "duration": 3200},
            ],
        }
    )
