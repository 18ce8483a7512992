"""Lyric generation on top of the LLM client.

Keyword expansion and translation are best-effort enrichments: they log and fall
back to their input on any failure. The main lyric call has no fallback and raises
``GenerationError``.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from lyric_studio.core.exceptions import GenerationError
from lyric_studio.core.models import TimingEntry
from lyric_studio.services.llm import LLMResponse
from lyric_studio.utils.languages import TRANSLATION_TARGET, language_list, language_name, needs_translation

logger = logging.getLogger(__name__)


class ChatBackend(Protocol):
    """Anything that can run a chat completion (``LLMClient`` or a stub)."""

    async def invoke(
        self,
        messages: list[dict[str, str]],
        response_format: dict[str, Any] | None = None,
    ) -> LLMResponse: ...


EXPAND_SYSTEM_PROMPT = (
    "You are a helpful assistant that expands keywords with relevant context and "
    "associations for lyric writing. Provide a brief, creative expansion of the "
    "keyword in 2-3 sentences."
)

LYRICIST_SYSTEM_PROMPT = (
    "You are a professional lyricist and songwriter. You create emotional, poetic, "
    "and memorable song lyrics that resonate with listeners. You understand rhythm, "
    "rhyme, and how to match lyrics to melody descriptions."
)

TRANSLATOR_SYSTEM_PROMPT = (
    "You are a professional translator specializing in song lyrics. Translate lyrics "
    "while preserving their poetic meaning, emotion, and artistic intent."
)

LYRIC_RESPONSE_FORMAT: dict[str, Any] = {
    "type": "json_schema",
    "json_schema": {
        "name": "lyric_generation",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "The title of the song"},
                "lyrics": {"type": "string", "description": "The complete lyrics with line breaks"},
                "timingData": {
                    "type": "array",
                    "description": "Timing information for each line",
                    "items": {
                        "type": "object",
                        "properties": {
                            "line": {"type": "string", "description": "The lyric line"},
                            "startTime": {"type": "number", "description": "Start time in milliseconds"},
                            "duration": {"type": "number", "description": "Duration in milliseconds"},
                        },
                        "required": ["line", "startTime", "duration"],
                        "additionalProperties": False,
                    },
                },
            },
            "required": ["title", "lyrics", "timingData"],
            "additionalProperties": False,
        },
    },
}


class _TimingItem(BaseModel):
    """One timing entry as the model emits it."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    line: str
    start_time: float = Field(..., alias="startTime", ge=0)
    duration: float = Field(..., ge=0)


class _LyricPayload(BaseModel):
    """Shape of the structured lyric response."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    title: str
    lyrics: str
    timing_data: list[_TimingItem] = Field(..., alias="timingData")


@dataclass
class GeneratedLyric:
    """Result of a successful generation."""

    title: str
    content: str
    timing_data: list[TimingEntry] = field(default_factory=list)
    translation: str | None = None


class LyricGenerator:
    """Builds prompts, calls the LLM and parses lyric responses."""

    def __init__(self, llm: ChatBackend, parallel_expansion: bool = False):
        """Initialize the generator.

        Args:
            llm: Chat backend used for every call.
            parallel_expansion: Expand keywords concurrently instead of one by one.
        """
        self.llm = llm
        self.parallel_expansion = parallel_expansion

    async def expand_keywords(self, keywords: list[str]) -> dict[str, str]:
        """Expand each keyword into a few sentences of songwriting context.

        Repeated keywords collapse into one entry. A keyword whose expansion fails
        maps to itself.
        """
        unique = list(dict.fromkeys(keywords))

        if self.parallel_expansion:
            expansions = await asyncio.gather(*(self._expand_keyword(k) for k in unique))
            return dict(zip(unique, expansions))

        expanded: dict[str, str] = {}
        for keyword in unique:
            expanded[keyword] = await self._expand_keyword(keyword)
        return expanded

    async def _expand_keyword(self, keyword: str) -> str:
        try:
            response = await self.llm.invoke(
                [
                    {"role": "system", "content": EXPAND_SYSTEM_PROMPT},
                    {"role": "user", "content": f"Expand this keyword for songwriting: {keyword}"},
                ]
            )
        except Exception as e:
            logger.warning(f"Failed to expand keyword '{keyword}': {e}")
            return keyword

        if not isinstance(response.content, str):
            logger.warning(f"Keyword expansion for '{keyword}' returned non-text content")
            return keyword
        return response.content

    async def generate_lyrics(
        self,
        keywords: list[str],
        melody_description: str,
        languages: list[str],
        is_mixed: bool,
    ) -> GeneratedLyric:
        """Generate a titled song with per-line timing.

        Adds a Chinese translation when ``languages`` does not include Chinese.

        Raises:
            GenerationError: If the LLM call fails or returns an unusable response.
        """
        expanded = await self.expand_keywords(keywords)
        user_prompt = build_lyric_prompt(expanded, melody_description, languages, is_mixed)

        try:
            response = await self.llm.invoke(
                [
                    {"role": "system", "content": LYRICIST_SYSTEM_PROMPT},
                    {"role": "user", "content": user_prompt},
                ],
                response_format=LYRIC_RESPONSE_FORMAT,
            )
        except Exception as e:
            logger.error(f"Lyric generation call failed: {e}")
            raise GenerationError() from e

        payload = parse_lyric_response(response.content)

        translation: str | None = None
        if needs_translation(languages):
            translation = await self.translate_lyrics(payload.lyrics, TRANSLATION_TARGET)

        return GeneratedLyric(
            title=payload.title,
            content=payload.lyrics,
            timing_data=[
                TimingEntry(line=item.line, start_time=item.start_time, duration=item.duration)
                for item in payload.timing_data
            ],
            translation=translation,
        )

    async def translate_lyrics(self, lyrics: str, target_language: str) -> str:
        """Translate lyrics, returning the original text on any failure."""
        target_name = language_name(target_language)

        try:
            response = await self.llm.invoke(
                [
                    {"role": "system", "content": TRANSLATOR_SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": (
                            f"Translate the following song lyrics to {target_name}. "
                            f"Preserve the structure and line breaks:\n\n{lyrics}"
                        ),
                    },
                ]
            )
        except Exception as e:
            logger.warning(f"Failed to translate lyrics to {target_name}: {e}")
            return lyrics

        if not isinstance(response.content, str):
            logger.warning(f"Translation to {target_name} returned non-text content")
            return lyrics
        return response.content


def build_language_instruction(languages: list[str], is_mixed: bool) -> str:
    """Describe how the requested languages should be used."""
    names = language_list(languages)
    if is_mixed:
        return f"Create lyrics mixing these languages: {names}. Feel free to switch between languages naturally."
    return f"Create lyrics primarily in {names}. You may use one or more of these languages, but keep it cohesive."


def build_lyric_prompt(
    expanded_keywords: dict[str, str],
    melody_description: str,
    languages: list[str],
    is_mixed: bool,
) -> str:
    """Build the user prompt for the main lyric call."""
    keyword_context = "\n".join(f"- {keyword}: {expansion}" for keyword, expansion in expanded_keywords.items())
    language_instruction = build_language_instruction(languages, is_mixed)

    return f"""Create song lyrics with the following requirements:

**Keywords and Themes:**
{keyword_context}

**Melody Description:**
{melody_description}

**Language Requirements:**
{language_instruction}

**Instructions:**
1. Create a complete song with verses, chorus, and bridge
2. Match the rhythm and mood of the melody description
3. Incorporate the keywords naturally and creatively
4. Use poetic language and vivid imagery
5. Ensure the lyrics flow well and are singable
6. If mixing languages, do so in a way that feels natural and artistic

Please provide:
1. A title for the song
2. The complete lyrics with clear structure (mark verses, chorus, bridge)
3. Timing information for each line (estimate start time in milliseconds and duration)

Timing entries must follow the lyric lines in order, one per line, with each line
starting where the previous one ends.

Format your response as JSON:
{{
  "title": "Song Title",
  "lyrics": "Full lyrics with \\n for line breaks",
  "timingData": [
    {{"line": "First line", "startTime": 0, "duration": 3000}},
    {{"line": "Second line", "startTime": 3000, "duration": 3000}}
  ]
}}"""


def parse_lyric_response(content: Any) -> _LyricPayload:
    """Parse the structured lyric response.

    Raises:
        GenerationError: If content is missing, not text, not JSON, or mis-shaped.
    """
    if not content or not isinstance(content, str):
        logger.error("No content in LLM lyric response")
        raise GenerationError()

    try:
        return _LyricPayload.model_validate(json.loads(content))
    except (json.JSONDecodeError, PydanticValidationError) as e:
        logger.error(f"Unusable LLM lyric response: {e}")
        raise GenerationError() from e
