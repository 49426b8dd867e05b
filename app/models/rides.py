"""Ride and passenger tables using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Table,
    Text,
    Uuid,
    func,
    text,
)

from app.models.base import metadata

rides = Table(
    "rides",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column(
        "driver_id",
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    # Route
    Column("from_location", Text, nullable=False),
    Column("to_location", Text, nullable=False),
    Column("time", DateTime(timezone=True), nullable=False),
    # Listing details
    Column("description", Text, nullable=False),
    Column("car_description", Text, nullable=False),
    Column("price", Float, nullable=False),
    # Seats
    Column("capacity", Integer, nullable=False),
    Column("seats_taken", Integer, nullable=False, server_default=text("0")),
    Column("filled", Boolean, nullable=False, server_default=text("false")),
    # Audit
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint("capacity >= 1", name="rides_capacity_check"),
    CheckConstraint(
        "seats_taken >= 0 AND seats_taken <= capacity",
        name="rides_seats_taken_check",
    ),
    CheckConstraint("price >= 0", name="rides_price_check"),
)

# Search filters on both endpoints, then on time
Index("ix_rides_route_time", rides.c.from_location, rides.c.to_location, rides.c.time)

ride_passengers = Table(
    "ride_passengers",
    metadata,
    Column(
        "ride_id",
        Uuid,
        ForeignKey("rides.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "user_id",
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
    Column("joined_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
