"""Authentication routes."""

from fastapi import APIRouter, Response

from backend.api.deps import OptionalUser, Settings
from backend.models.responses import SuccessResponse
from lyric_studio.core.models import User

router = APIRouter()


@router.get("/me", response_model=User | None)
async def get_current_user_endpoint(user: OptionalUser) -> User | None:
    """Get the current user, or null when not signed in."""
    return user


@router.post("/logout", response_model=SuccessResponse)
async def logout(response: Response, settings: Settings) -> SuccessResponse:
    """Log out by clearing the session cookie.

    Bearer-token clients should also discard their token; the server does
    not maintain a token blacklist.
    """
    response.delete_cookie(settings.session_cookie_name, path="/")
    return SuccessResponse()
