"""Dependency injection for API routes.

Process-wide objects (store, LLM client, feedback service) are built once in
``backend.main.create_app`` and kept on ``app.state``.
"""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.config import BackendSettings
from backend.services.auth_service import AuthService
from backend.services.feedback_service import FeedbackService
from backend.services.store import LyricStore
from lyric_studio.core.exceptions import AuthenticationError, DatabaseUnavailableError
from lyric_studio.core.models import User
from lyric_studio.services.lyric_generator import ChatBackend, LyricGenerator

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_settings(request: Request) -> BackendSettings:
    """Get application settings."""
    settings: BackendSettings = request.app.state.settings
    return settings


async def get_store(request: Request) -> LyricStore:
    """Get the persistence store configured at startup."""
    store: LyricStore = request.app.state.store
    return store


async def get_llm(request: Request) -> ChatBackend:
    """Get the LLM backend configured at startup."""
    llm: ChatBackend = request.app.state.llm
    return llm


async def get_feedback_service(request: Request) -> FeedbackService:
    """Get the shared feedback service."""
    feedback_service: FeedbackService = request.app.state.feedback_service
    return feedback_service


async def get_lyric_generator(
    llm: Annotated[ChatBackend, Depends(get_llm)],
    settings: Annotated[BackendSettings, Depends(get_settings)],
) -> LyricGenerator:
    """Get a lyric generator bound to the configured LLM."""
    return LyricGenerator(llm, parallel_expansion=settings.parallel_keyword_expansion)


async def get_auth_service(
    settings: Annotated[BackendSettings, Depends(get_settings)],
    store: Annotated[LyricStore, Depends(get_store)],
) -> AuthService:
    """Get the auth service."""
    return AuthService(settings, store)


def _session_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
    settings: BackendSettings,
) -> str | None:
    """Bearer header wins; the session cookie is the fallback."""
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(settings.session_cookie_name)


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[BackendSettings, Depends(get_settings)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> User:
    """Get the current authenticated user from the session token.

    Raises:
        HTTPException: If not authenticated, token is invalid, or users cannot be stored.
    """
    token = _session_token(request, credentials, settings)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return await auth_service.authenticate(token)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    except DatabaseUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )


async def get_optional_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[BackendSettings, Depends(get_settings)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> User | None:
    """Get the current user if authenticated, None otherwise."""
    try:
        return await get_current_user(request, credentials, settings, auth_service)
    except HTTPException:
        return None


# Type aliases for cleaner route signatures
CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]
Settings = Annotated[BackendSettings, Depends(get_settings)]
StoreDep = Annotated[LyricStore, Depends(get_store)]
LyricGeneratorDep = Annotated[LyricGenerator, Depends(get_lyric_generator)]
FeedbackServiceDep = Annotated[FeedbackService, Depends(get_feedback_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
