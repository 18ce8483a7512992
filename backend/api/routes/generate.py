"""Lyric generation routes.

Generation runs keyword expansion, the main lyric call and (for non-Chinese
lyrics) a translation, then stores the result as a new lyric.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field, StringConstraints

from backend.api.deps import CurrentUser, LyricGeneratorDep, StoreDep
from lyric_studio.core.exceptions import DatabaseUnavailableError, GenerationError
from lyric_studio.core.models import Lyric
from lyric_studio.utils.languages import join_language_codes

logger = logging.getLogger(__name__)

router = APIRouter()

KeywordText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
LanguageCode = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=16)]


class ExpandKeywordsRequest(BaseModel):
    """Request to expand keywords."""

    keywords: list[KeywordText] = Field(..., max_length=50)


class GenerateLyricsRequest(BaseModel):
    """Request to generate and store lyrics."""

    keywords: list[KeywordText] = Field(..., max_length=50)
    melody_description: str = Field(..., min_length=1, max_length=5000)
    languages: list[LanguageCode] = Field(..., min_length=1, max_length=10)
    is_mixed: bool = False
    keyword_ids: list[int] | None = Field(None, description="Saved keywords this lyric is based on")
    melody_id: int | None = Field(None, description="Saved melody this lyric is based on")


@router.post("/expand-keywords", response_model=dict[str, str])
async def expand_keywords(
    request: ExpandKeywordsRequest,
    user: CurrentUser,
    generator: LyricGeneratorDep,
) -> dict[str, str]:
    """Expand each keyword with a few sentences of songwriting context.

    Keywords that fail to expand map to themselves.
    """
    return await generator.expand_keywords(request.keywords)


@router.post("/lyrics", response_model=Lyric, status_code=status.HTTP_201_CREATED)
async def generate_lyrics(
    request: GenerateLyricsRequest,
    user: CurrentUser,
    generator: LyricGeneratorDep,
    store: StoreDep,
) -> Lyric:
    """Generate lyrics and store them.

    The stored lyric starts with a zero satisfaction score and default weight.
    """
    try:
        generated = await generator.generate_lyrics(
            keywords=request.keywords,
            melody_description=request.melody_description,
            languages=request.languages,
            is_mixed=request.is_mixed,
        )
    except GenerationError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        )

    try:
        lyric = await store.create_lyric(
            user_id=user.id,
            title=generated.title,
            content=generated.content,
            languages=join_language_codes(request.languages),
            is_mixed=request.is_mixed,
            translation=generated.translation,
            keyword_ids=request.keyword_ids,
            melody_id=request.melody_id,
            timing_data=generated.timing_data,
        )
    except DatabaseUnavailableError:
        raise
    except Exception as e:
        logger.error(f"Failed to save generated lyrics for user {user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save lyrics. Please try again.",
        )

    logger.info(f"Generated lyric {lyric.id} for user {user.id} ({lyric.languages})")
    return lyric
