"""Feedback routes.

Likes and dislikes move a lyric's satisfaction score and weight; every
submission, neutral included, is kept in the feedback history.
"""

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from backend.api.deps import CurrentUser, FeedbackServiceDep
from lyric_studio.core.models import FeedbackHistory, FeedbackType

router = APIRouter()


class CreateFeedbackRequest(BaseModel):
    """Request to leave feedback on a lyric."""

    lyric_id: int
    feedback_type: FeedbackType
    comment: str | None = Field(None, max_length=2000)


@router.post("", response_model=FeedbackHistory, status_code=status.HTTP_201_CREATED)
async def create_feedback(
    request: CreateFeedbackRequest,
    user: CurrentUser,
    feedback_service: FeedbackServiceDep,
) -> FeedbackHistory:
    """Record feedback and update the lyric's score and weight.

    Feedback on a lyric that no longer exists is still recorded.
    """
    return await feedback_service.submit_feedback(
        user_id=user.id,
        lyric_id=request.lyric_id,
        feedback_type=request.feedback_type,
        comment=request.comment,
    )


@router.get("/lyrics/{lyric_id}", response_model=list[FeedbackHistory])
async def get_feedback_for_lyric(
    lyric_id: int,
    user: CurrentUser,
    feedback_service: FeedbackServiceDep,
) -> list[FeedbackHistory]:
    """List the user's feedback on a lyric, newest first."""
    return await feedback_service.list_for_lyric(lyric_id, user.id)


@router.get("/mine", response_model=list[FeedbackHistory])
async def get_my_feedback(user: CurrentUser, feedback_service: FeedbackServiceDep) -> list[FeedbackHistory]:
    """List all of the user's feedback, newest first."""
    return await feedback_service.list_for_user(user.id)
