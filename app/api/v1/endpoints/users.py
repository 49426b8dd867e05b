"""User endpoints."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from app.dependencies import CacheManagerDep, CurrentUser, DatabaseSession
from app.schemas.users import (
    UserProfile,
    UserResponse,
    UserUpdate,
    UserWithHostedRides,
    UserWithJoinedRides,
)
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(current_user: CurrentUser) -> UserResponse:
    """Get current user's profile."""
    return UserResponse.model_validate(current_user)


@router.patch("/me", response_model=UserResponse)
async def update_current_user_profile(
    user_data: UserUpdate,
    cache_manager: CacheManagerDep,
    db: DatabaseSession,
    current_user: CurrentUser,
) -> UserResponse:
    """Update current user's profile; only the fields sent are changed."""
    user = await UserService(cache_manager).update_user(db, current_user["id"], user_data)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    return UserResponse.model_validate(user)


@router.get("/me/joined-rides", response_model=UserWithJoinedRides)
async def get_joined_rides(
    cache_manager: CacheManagerDep,
    db: DatabaseSession,
    current_user: CurrentUser,
) -> UserWithJoinedRides:
    """Get current user with the rides they joined as a passenger."""
    return await UserService(cache_manager).get_joined_rides(db, current_user["id"])


@router.get("/me/hosted-rides", response_model=UserWithHostedRides)
async def get_hosted_rides(
    cache_manager: CacheManagerDep,
    db: DatabaseSession,
    current_user: CurrentUser,
) -> UserWithHostedRides:
    """Get current user with the rides they drive."""
    return await UserService(cache_manager).get_hosted_rides(db, current_user["id"])


@router.get("/{user_id}", response_model=UserProfile)
async def get_user(
    user_id: UUID,
    cache_manager: CacheManagerDep,
    db: DatabaseSession,
) -> UserProfile:
    """Get public profile of a user."""
    user = await UserService(cache_manager).get_user_by_id(db, user_id)

    if not user or not user["is_active"]:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    return UserProfile.model_validate(user)
