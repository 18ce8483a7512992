"""Keyword routes for managing a user's saved keywords."""

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from backend.api.deps import CurrentUser, StoreDep
from backend.models.responses import SuccessResponse
from lyric_studio.core.models import DEFAULT_WEIGHT, MAX_WEIGHT, MIN_WEIGHT, Keyword

router = APIRouter()


class CreateKeywordRequest(BaseModel):
    """Request to save a keyword."""

    keyword: str = Field(..., min_length=1, max_length=255)
    search_results: str | None = Field(None, description="Cached search results, usually JSON text")


class UpdateKeywordRequest(BaseModel):
    """Request to update a keyword. Omitted fields are unchanged."""

    keyword: str | None = Field(None, min_length=1, max_length=255)
    search_results: str | None = None
    weight: float | None = Field(None, ge=MIN_WEIGHT, le=MAX_WEIGHT)


@router.get("", response_model=list[Keyword])
async def list_keywords(user: CurrentUser, store: StoreDep) -> list[Keyword]:
    """List the user's keywords, newest first."""
    return await store.list_keywords(user.id)


@router.post("", response_model=Keyword, status_code=status.HTTP_201_CREATED)
async def create_keyword(
    request: CreateKeywordRequest,
    user: CurrentUser,
    store: StoreDep,
) -> Keyword:
    """Save a keyword with the default weight."""
    return await store.create_keyword(
        user_id=user.id,
        keyword=request.keyword,
        search_results=request.search_results,
        weight=DEFAULT_WEIGHT,
    )


@router.put("/{keyword_id}", response_model=SuccessResponse)
async def update_keyword(
    keyword_id: int,
    request: UpdateKeywordRequest,
    user: CurrentUser,
    store: StoreDep,
) -> SuccessResponse:
    """Update a keyword. Unknown ids are ignored."""
    updates = request.model_dump(exclude_none=True)
    if updates:
        await store.update_keyword(keyword_id, user.id, updates)
    return SuccessResponse()


@router.delete("/{keyword_id}", response_model=SuccessResponse)
async def delete_keyword(keyword_id: int, user: CurrentUser, store: StoreDep) -> SuccessResponse:
    """Delete a keyword. Deleting a missing keyword still succeeds."""
    await store.delete_keyword(keyword_id, user.id)
    return SuccessResponse()
