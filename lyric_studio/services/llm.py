"""LLM client for Lyric Studio.

Talks to any OpenAI-compatible ``/chat/completions`` endpoint.
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from lyric_studio.core.config import Settings
from lyric_studio.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Result of one chat completion.

    ``content`` is whatever the provider returned for the first choice;
    it is usually a string but may be ``None`` or a list of content parts.
    """

    content: Any
    model: str | None = None
    finish_reason: str | None = None


class LLMClient:
    """Client for a chat-completions LLM API."""

    SERVICE_NAME = "LLM"

    def __init__(self, settings: Settings):
        self.settings = settings
        self.api_url = settings.llm_api_url.rstrip("/")
        self.api_key = settings.llm_api_key
        self.model = settings.llm_model
        self.timeout = settings.llm_timeout_seconds

    @property
    def is_configured(self) -> bool:
        """Check if an API key is available."""
        return bool(self.api_key)

    async def invoke(
        self,
        messages: list[dict[str, str]],
        response_format: dict[str, Any] | None = None,
    ) -> LLMResponse:
        """Run one chat completion.

        Args:
            messages: Chat messages as ``{"role": ..., "content": ...}`` dicts.
            response_format: Optional structured-output constraint, passed through.

        Returns:
            The first choice of the completion.

        Raises:
            ExternalServiceError: If the client is unconfigured, the request fails,
                or the response has no choices.
        """
        if not self.is_configured:
            raise ExternalServiceError(self.SERVICE_NAME, "LLM_API_KEY is not configured")

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
        }
        if response_format is not None:
            payload["response_format"] = response_format

        data = await self._api_request("chat/completions", payload)

        choices = data.get("choices") or []
        if not choices:
            raise ExternalServiceError(self.SERVICE_NAME, "Response contained no choices")

        choice = choices[0]
        message = choice.get("message") or {}
        return LLMResponse(
            content=message.get("content"),
            model=data.get("model"),
            finish_reason=choice.get("finish_reason"),
        )

    def _headers(self) -> dict[str, str]:
        """Build request headers."""
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _api_request(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST a JSON payload to the LLM API."""
        url = f"{self.api_url}/{path}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, json=payload, headers=self._headers())
        except httpx.HTTPError as e:
            raise ExternalServiceError(self.SERVICE_NAME, f"Request failed: {e}")

        if response.status_code != 200:
            raise ExternalServiceError(self.SERVICE_NAME, f"API error {response.status_code}: {response.text}")

        try:
            data: dict[str, Any] = response.json()
        except ValueError as e:
            raise ExternalServiceError(self.SERVICE_NAME, f"Invalid JSON response: {e}")

        # Some providers return 200 with an error body
        if "error" in data:
            error = data["error"]
            message = error.get("message", "Unknown error") if isinstance(error, dict) else str(error)
            raise ExternalServiceError(self.SERVICE_NAME, message)

        logger.debug(f"LLM call to {path} completed (model={data.get('model')})")
        return data
