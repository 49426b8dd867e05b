"""Authentication endpoints."""

from fastapi import APIRouter, status

from app.dependencies import CacheManagerDep, DatabaseSession
from app.schemas.auth import FirebaseAuthRequest, LoginResponse, Token, TokenRefresh
from app.schemas.users import UserResponse
from app.services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/firebase/verify",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Exchange a Firebase ID token for API tokens",
)
async def firebase_verify(
    request: FirebaseAuthRequest,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
) -> LoginResponse:
    """
    Verify a Firebase ID token and return JWT tokens.

    The client signs in with Google through Firebase Authentication and
    sends the resulting ID token here. The user record is created on first
    sign-in.

    Args:
        request: Firebase ID token
        db: Database session
        cache_manager: Cache for user profiles

    Returns:
        Access token, refresh token, and user information
    """
    auth_service = AuthService(cache_manager)

    firebase_token_data = await auth_service.verify_firebase_id_token(request.id_token)
    user, tokens = await auth_service.handle_firebase_login(firebase_token_data, db)

    return LoginResponse(
        **tokens.model_dump(),
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/refresh",
    response_model=Token,
    status_code=status.HTTP_200_OK,
    summary="Refresh access token",
)
async def refresh_token(request: TokenRefresh, cache_manager: CacheManagerDep) -> Token:
    """Issue a new token pair from a valid, unrevoked refresh token."""
    return AuthService(cache_manager).refresh_access_token(request.refresh_token)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Logout and revoke tokens",
)
async def logout(request: TokenRefresh, cache_manager: CacheManagerDep) -> None:
    """Logout user by revoking refresh token."""
    AuthService(cache_manager).revoke_token(request.refresh_token)
