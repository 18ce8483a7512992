"""Shared API response models."""

from pydantic import BaseModel


class SuccessResponse(BaseModel):
    """Acknowledgement for mutations with nothing richer to return."""

    success: bool = True
