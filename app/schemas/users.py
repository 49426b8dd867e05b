"""User schemas for request/response validation."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, EmailStr, HttpUrl, field_validator

from app.schemas.rides import RideResponse


class UserCreate(BaseModel):
    """Schema for the user record created on first sign-in."""

    firebase_uid: str
    email: EmailStr | None = None
    email_verified: bool = False
    name: str | None = None
    image: str | None = None


class UserUpdate(BaseModel):
    """Schema for updating user profile; only fields sent are written."""

    name: str | None = None
    email: EmailStr | None = None
    image: HttpUrl | None = None

    @field_validator("name", "email", "image", mode="before")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        """Fields may be left out but not cleared."""
        if v is None:
            raise ValueError("Field may be omitted but not set to null")
        return v


class UserResponse(BaseModel):
    """User schema for API responses."""

    id: UUID
    name: str | None = None
    email: str | None = None
    email_verified: bool
    image: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None = None

    model_config = {"from_attributes": True}


class UserProfile(BaseModel):
    """Public user profile schema."""

    id: UUID
    name: str | None = None
    image: str | None = None

    model_config = {"from_attributes": True}


class UserWithJoinedRides(UserResponse):
    """User together with the rides they have joined as a passenger."""

    joined_rides: list[RideResponse]


class UserWithHostedRides(UserResponse):
    """User together with the rides they drive."""

    hosted_rides: list[RideResponse]
