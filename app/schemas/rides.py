"""Ride schemas for request/response validation."""

from datetime import UTC, datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to UTC, reading naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class RideBase(BaseModel):
    """Fields a driver sets when posting or editing a ride."""

    from_location: str = Field(..., min_length=1, max_length=200)
    to_location: str = Field(..., min_length=1, max_length=200)
    time: datetime
    description: str = Field(..., max_length=1000)
    car_description: str = Field(..., max_length=200)
    price: float = Field(..., ge=0)
    capacity: int = Field(..., ge=1)

    @field_validator("time")
    @classmethod
    def normalize_time(cls, v: datetime) -> datetime:
        """Store departure times in UTC."""
        return as_utc(v)


class RideCreate(RideBase):
    """Schema for posting a new ride."""


class RideUpdate(RideBase):
    """Schema for editing a ride; every field is overwritten."""


class RideSearch(BaseModel):
    """Search criteria: exact endpoints, departing at or after ``date``."""

    from_location: str
    to_location: str
    date: datetime

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        """Compare against stored UTC times."""
        return as_utc(v)


class RideResponse(RideBase):
    """Schema for ride responses."""

    id: UUID
    driver_id: UUID
    seats_taken: int
    filled: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
