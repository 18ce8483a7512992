"""Melody routes for managing a user's melody descriptions."""

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from backend.api.deps import CurrentUser, StoreDep
from backend.models.responses import SuccessResponse
from lyric_studio.core.models import DEFAULT_WEIGHT, MAX_WEIGHT, MIN_WEIGHT, Melody, MelodyType

router = APIRouter()


class CreateMelodyRequest(BaseModel):
    """Request to save a melody."""

    description: str = Field(..., min_length=1)
    melody_type: MelodyType
    melody_data: str | None = Field(None, description="Structured melody data, usually JSON text")


class UpdateMelodyRequest(BaseModel):
    """Request to update a melody. Omitted fields are unchanged."""

    description: str | None = Field(None, min_length=1)
    melody_type: MelodyType | None = None
    melody_data: str | None = None
    weight: float | None = Field(None, ge=MIN_WEIGHT, le=MAX_WEIGHT)


@router.get("", response_model=list[Melody])
async def list_melodies(user: CurrentUser, store: StoreDep) -> list[Melody]:
    """List the user's melodies, newest first."""
    return await store.list_melodies(user.id)


@router.post("", response_model=Melody, status_code=status.HTTP_201_CREATED)
async def create_melody(
    request: CreateMelodyRequest,
    user: CurrentUser,
    store: StoreDep,
) -> Melody:
    """Save a melody with the default weight."""
    return await store.create_melody(
        user_id=user.id,
        description=request.description,
        melody_type=request.melody_type,
        melody_data=request.melody_data,
        weight=DEFAULT_WEIGHT,
    )


@router.put("/{melody_id}", response_model=SuccessResponse)
async def update_melody(
    melody_id: int,
    request: UpdateMelodyRequest,
    user: CurrentUser,
    store: StoreDep,
) -> SuccessResponse:
    """Update a melody. Unknown ids are ignored."""
    updates = request.model_dump(exclude_none=True)
    if updates:
        await store.update_melody(melody_id, user.id, updates)
    return SuccessResponse()


@router.delete("/{melody_id}", response_model=SuccessResponse)
async def delete_melody(melody_id: int, user: CurrentUser, store: StoreDep) -> SuccessResponse:
    """Delete a melody."""
    await store.delete_melody(melody_id, user.id)
    return SuccessResponse()
