"""User preference routes."""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from backend.api.deps import CurrentUser, StoreDep
from backend.models.responses import SuccessResponse
from lyric_studio.core.models import UserPreference
from lyric_studio.utils.languages import join_language_codes, split_language_codes

router = APIRouter()


class UpsertPreferenceRequest(BaseModel):
    """Request to set the user's generation defaults."""

    preferred_languages: str = Field(..., min_length=1, max_length=255, description="Comma-separated codes")
    allow_mixed_language: bool
    default_melody_type: str = Field(..., min_length=1, max_length=50)


@router.get("", response_model=UserPreference | None)
async def get_preferences(user: CurrentUser, store: StoreDep) -> UserPreference | None:
    """Get the user's preferences, or null if never set."""
    return await store.get_preference(user.id)


@router.put("", response_model=SuccessResponse)
async def upsert_preferences(
    request: UpsertPreferenceRequest,
    user: CurrentUser,
    store: StoreDep,
) -> SuccessResponse:
    """Create or replace the user's preferences."""
    await store.upsert_preference(
        user_id=user.id,
        preferred_languages=join_language_codes(split_language_codes(request.preferred_languages)),
        allow_mixed_language=request.allow_mixed_language,
        default_melody_type=request.default_melody_type,
    )
    return SuccessResponse()
