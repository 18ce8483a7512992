"""Authentication service for session JWTs.

Tokens are issued by the identity provider (or ``generate_jwt`` in development)
and carry the user's open id in ``sub``. Each authenticated request upserts the
user, which creates it on first sign-in and refreshes ``last_signed_in``.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from backend.config import BackendSettings
from backend.services.store import LyricStore
from lyric_studio.core.exceptions import AuthenticationError
from lyric_studio.core.models import User, UserRole

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, settings: BackendSettings, store: LyricStore):
        self.settings = settings
        self.store = store

    def generate_jwt(
        self,
        open_id: str,
        name: str | None = None,
        email: str | None = None,
        login_method: str | None = None,
    ) -> tuple[str, int]:
        """Generate a session JWT for an open id.

        Args:
            open_id: Identity-provider id of the user
            name: Optional display name claim
            email: Optional email claim
            login_method: Optional login method claim

        Returns:
            Tuple of (token, expires_in_seconds)

        Raises:
            ValueError: If JWT secret is not configured
        """
        if not self.settings.jwt_secret:
            raise ValueError("JWT_SECRET is not configured")

        now = datetime.now(UTC)
        expires_at = now + timedelta(hours=self.settings.jwt_expiration_hours)
        expires_in = int((expires_at - now).total_seconds())

        payload: dict[str, Any] = {
            "sub": open_id,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        if name is not None:
            payload["name"] = name
        if email is not None:
            payload["email"] = email
        if login_method is not None:
            payload["login_method"] = login_method

        token = jwt.encode(
            payload,
            self.settings.jwt_secret,
            algorithm=self.settings.jwt_algorithm,
        )

        return token, expires_in

    def validate_jwt(self, token: str) -> dict[str, Any]:
        """Validate a JWT token and return its claims.

        Raises:
            AuthenticationError: If token is invalid, expired, or has no subject
        """
        if not self.settings.jwt_secret:
            raise AuthenticationError("JWT_SECRET is not configured")

        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret,
                algorithms=[self.settings.jwt_algorithm],
            )
        except JWTError as e:
            raise AuthenticationError(f"Invalid token: {e}")

        if not payload.get("sub"):
            raise AuthenticationError("Invalid token: missing subject")

        return dict(payload)

    def resolve_role(self, open_id: str) -> UserRole | None:
        """Role to force on sign-in, or None to keep the stored one."""
        if self.settings.owner_open_id and open_id == self.settings.owner_open_id:
            return "admin"
        return None

    async def authenticate(self, token: str) -> User:
        """Validate a token and upsert the user it names.

        Raises:
            AuthenticationError: If the token is invalid
            DatabaseUnavailableError: If no database is configured
        """
        claims = self.validate_jwt(token)
        open_id: str = claims["sub"]

        return await self.store.upsert_user(
            open_id=open_id,
            name=claims.get("name"),
            email=claims.get("email"),
            login_method=claims.get("login_method"),
            role=self.resolve_role(open_id),
        )
