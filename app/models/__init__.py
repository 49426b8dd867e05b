"""Database models."""

from app.models.base import metadata
from app.models.rides import ride_passengers, rides
from app.models.users import users

__all__ = [
    "metadata",
    "ride_passengers",
    "rides",
    "users",
]
