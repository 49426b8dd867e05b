"""Authentication service for Firebase sign-in and JWT sessions."""

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import UnauthorizedException
from app.core.firebase import verify_firebase_token
from app.core.redis_client import CacheManager
from app.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
)
from app.schemas.auth import Token
from app.schemas.users import UserCreate
from app.services.user_service import UserService

# Revoked refresh tokens stay blacklisted for the longest refresh lifetime
REVOKED_TOKEN_TTL = 86400 * 30


class AuthService:
    """Authentication service for handling Firebase and JWT operations."""

    def __init__(self, cache_manager: CacheManager | None):
        """Initialize auth service with cache manager."""
        self.cache = cache_manager

    @staticmethod
    def _blacklist_key(token: str) -> str:
        return f"blacklist:{token}"

    async def verify_firebase_id_token(self, id_token: str) -> dict:
        """
        Verify Firebase ID token and extract user information.

        Raises:
            UnauthorizedException: If token verification fails
        """
        try:
            return await verify_firebase_token(id_token)
        except ValueError as e:
            raise UnauthorizedException(str(e)) from e

    async def handle_firebase_login(
        self, firebase_token_data: dict, db: AsyncSession
    ) -> tuple[dict, Token]:
        """
        Get or create the user behind a verified Firebase token and issue tokens.

        Args:
            firebase_token_data: Decoded Firebase token with user info
            db: Database session

        Returns:
            Tuple of (user dict, token pair)
        """
        email = firebase_token_data.get("email")
        if not email:
            raise UnauthorizedException("Email is required from Firebase token")

        user_data = UserCreate(
            firebase_uid=firebase_token_data["uid"],
            email=email,
            email_verified=firebase_token_data.get("email_verified", False),
            name=firebase_token_data.get("name", email),
            image=firebase_token_data.get("picture"),
        )

        user = await UserService(self.cache).get_or_create_user(db, user_data)

        return user, self.create_tokens(str(user["id"]))

    def create_tokens(self, user_id: str) -> Token:
        """Create an access and refresh token pair for a user."""
        return Token(
            access_token=create_access_token(data={"sub": user_id}),
            refresh_token=create_refresh_token(data={"sub": user_id}),
            token_type="bearer",
        )

    def refresh_access_token(self, refresh_token: str) -> Token:
        """
        Create a new token pair from a refresh token.

        Raises:
            UnauthorizedException: If the refresh token is invalid or revoked
        """
        payload = decode_refresh_token(refresh_token)

        if payload is None or payload.get("sub") is None:
            raise UnauthorizedException("Invalid refresh token")

        if self.cache and self.cache.exists(self._blacklist_key(refresh_token)):
            raise UnauthorizedException("Token has been revoked")

        return self.create_tokens(payload["sub"])

    def revoke_token(self, token: str, ttl: int = REVOKED_TOKEN_TTL) -> None:
        """Revoke a refresh token by adding it to the blacklist."""
        if self.cache:
            self.cache.set(self._blacklist_key(token), "1", ttl=ttl)
