"""Lyric routes for browsing and editing stored lyrics."""

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from backend.api.deps import CurrentUser, StoreDep
from backend.models.responses import SuccessResponse
from lyric_studio.core.models import (
    MAX_SATISFACTION_SCORE,
    MAX_WEIGHT,
    MIN_SATISFACTION_SCORE,
    MIN_WEIGHT,
    Lyric,
    TimingEntry,
)
from lyric_studio.utils.languages import join_language_codes, split_language_codes

router = APIRouter()


class CreateLyricRequest(BaseModel):
    """Request to store a lyric written outside the generator."""

    title: str | None = Field(None, max_length=255)
    content: str = Field(..., min_length=1)
    languages: str = Field(..., min_length=1, max_length=255, description="Comma-separated codes, e.g. 'zh,en'")
    is_mixed: bool
    translation: str | None = None
    keyword_ids: list[int] | None = None
    melody_id: int | None = None
    timing_data: list[TimingEntry] | None = None


class UpdateLyricRequest(BaseModel):
    """Request to update a lyric. Omitted fields are unchanged."""

    title: str | None = Field(None, max_length=255)
    content: str | None = Field(None, min_length=1)
    satisfaction_score: int | None = Field(None, ge=MIN_SATISFACTION_SCORE, le=MAX_SATISFACTION_SCORE)
    weight: float | None = Field(None, ge=MIN_WEIGHT, le=MAX_WEIGHT)
    timing_data: list[TimingEntry] | None = None


@router.get("", response_model=list[Lyric])
async def list_lyrics(user: CurrentUser, store: StoreDep) -> list[Lyric]:
    """List the user's lyrics, newest first."""
    return await store.list_lyrics(user.id)


@router.get("/{lyric_id}", response_model=Lyric | None)
async def get_lyric(lyric_id: int, user: CurrentUser, store: StoreDep) -> Lyric | None:
    """Get one of the user's lyrics, or null if it does not exist.

    Lyrics owned by other users are reported as missing.
    """
    lyric = await store.get_lyric(lyric_id)
    if lyric is None or lyric.user_id != user.id:
        return None
    return lyric


@router.post("", response_model=Lyric, status_code=status.HTTP_201_CREATED)
async def create_lyric(
    request: CreateLyricRequest,
    user: CurrentUser,
    store: StoreDep,
) -> Lyric:
    """Store a lyric with a zero satisfaction score and default weight."""
    return await store.create_lyric(
        user_id=user.id,
        title=request.title,
        content=request.content,
        languages=join_language_codes(split_language_codes(request.languages)),
        is_mixed=request.is_mixed,
        translation=request.translation,
        keyword_ids=request.keyword_ids,
        melody_id=request.melody_id,
        timing_data=request.timing_data,
    )


@router.put("/{lyric_id}", response_model=SuccessResponse)
async def update_lyric(
    lyric_id: int,
    request: UpdateLyricRequest,
    user: CurrentUser,
    store: StoreDep,
) -> SuccessResponse:
    """Update a lyric. Unknown ids are ignored."""
    # Keep TimingEntry objects intact rather than dumping them to dicts
    updates = {field: getattr(request, field) for field in request.model_fields_set if getattr(request, field) is not None}
    if updates:
        await store.update_lyric(lyric_id, updates, user_id=user.id)
    return SuccessResponse()


@router.delete("/{lyric_id}", response_model=SuccessResponse)
async def delete_lyric(lyric_id: int, user: CurrentUser, store: StoreDep) -> SuccessResponse:
    """Delete a lyric. Deleting a missing lyric still succeeds."""
    await store.delete_lyric(lyric_id, user.id)
    return SuccessResponse()
