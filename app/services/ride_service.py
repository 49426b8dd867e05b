"""Ride service: posting, searching, joining and leaving rides."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import and_, case, delete, exists, insert, select, update
from sqlalchemy.engine import Result
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AlreadyJoinedException,
    BadRequestException,
    ForbiddenException,
    NotJoinedException,
    RideFullException,
    RideNotFoundException,
)
from app.models.rides import ride_passengers, rides
from app.schemas.rides import RideCreate, RideResponse, RideSearch, RideUpdate

logger = structlog.get_logger(__name__)


def _to_rides(result: Result[Any]) -> list[RideResponse]:
    return [RideResponse.model_validate(dict(row)) for row in result.mappings()]


class RideService:
    """Service for managing rides and their passengers."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def _get_ride_row(self, ride_id: UUID) -> dict:
        result = await self.db.execute(select(rides).where(rides.c.id == ride_id))
        row = result.mappings().first()
        if not row:
            raise RideNotFoundException()
        return dict(row)

    async def _is_passenger(self, ride_id: UUID, user_id: UUID) -> bool:
        stmt = select(
            exists().where(
                and_(
                    ride_passengers.c.ride_id == ride_id,
                    ride_passengers.c.user_id == user_id,
                )
            )
        )
        result = await self.db.execute(stmt)
        return bool(result.scalar())

    async def list_rides(self) -> list[RideResponse]:
        """Return every ride, earliest departure first."""
        result = await self.db.execute(select(rides).order_by(rides.c.time))
        return _to_rides(result)

    async def search_rides(self, criteria: RideSearch) -> list[RideResponse]:
        """
        Find rides between two places departing at or after a date.

        Origin and destination must match exactly; ``criteria.date`` is a
        lower bound on departure time, not a day window.
        """
        stmt = (
            select(rides)
            .where(
                and_(
                    rides.c.from_location == criteria.from_location,
                    rides.c.to_location == criteria.to_location,
                    rides.c.time >= criteria.date,
                )
            )
            .order_by(rides.c.time)
        )
        result = await self.db.execute(stmt)
        return _to_rides(result)

    async def get_ride(self, ride_id: UUID) -> RideResponse:
        """
        Get ride by ID.

        Raises:
            RideNotFoundException: If the ride does not exist
        """
        return RideResponse.model_validate(await self._get_ride_row(ride_id))

    async def list_rides_by_driver(self, driver_id: UUID) -> list[RideResponse]:
        """Return the rides driven by ``driver_id``."""
        stmt = select(rides).where(rides.c.driver_id == driver_id).order_by(rides.c.time)
        result = await self.db.execute(stmt)
        return _to_rides(result)

    async def create_ride(self, driver_id: UUID, data: RideCreate) -> RideResponse:
        """
        Post a new ride driven by ``driver_id``.

        Args:
            driver_id: ID of the acting user
            data: Ride details

        Returns:
            Created ride, with no seats taken
        """
        stmt = (
            insert(rides)
            .values(**data.model_dump(), driver_id=driver_id, seats_taken=0, filled=False)
            .returning(rides)
        )
        result = await self.db.execute(stmt)
        row = result.mappings().one()
        await self.db.commit()

        ride = RideResponse.model_validate(dict(row))
        logger.info("ride_created", ride_id=str(ride.id), driver_id=str(driver_id))
        return ride

    async def update_ride(self, ride_id: UUID, user_id: UUID, data: RideUpdate) -> RideResponse:
        """
        Overwrite every editable field of a ride.

        Raises:
            RideNotFoundException: If the ride does not exist
            ForbiddenException: If the acting user is not the driver
            BadRequestException: If the new capacity is below the seats already taken
        """
        ride = await self._get_ride_row(ride_id)

        if ride["driver_id"] != user_id:
            raise ForbiddenException("Only the driver can update this ride.")

        if data.capacity < ride["seats_taken"]:
            raise BadRequestException("Capacity cannot be lower than the seats already taken.")

        stmt = (
            update(rides)
            .where(and_(rides.c.id == ride_id, rides.c.seats_taken <= data.capacity))
            .values(
                **data.model_dump(),
                filled=rides.c.seats_taken >= data.capacity,
                updated_at=datetime.now(UTC),
            )
            .returning(rides)
        )
        result = await self.db.execute(stmt)
        row = result.mappings().first()

        if row is None:
            # A passenger joined between the check and the write
            await self.db.rollback()
            raise BadRequestException("Capacity cannot be lower than the seats already taken.")

        await self.db.commit()
        logger.info("ride_updated", ride_id=str(ride_id))
        return RideResponse.model_validate(dict(row))

    async def join_ride(self, ride_id: UUID, user_id: UUID) -> RideResponse:
        """
        Add the acting user as a passenger and take one seat.

        The link and the seat count change commit together. The count only
        moves while ``seats_taken < capacity`` holds in the database, so
        concurrent joins cannot overbook the ride.

        Raises:
            RideNotFoundException: If the ride does not exist
            RideFullException: If no seat is left
            AlreadyJoinedException: If the user is already a passenger
        """
        ride = await self._get_ride_row(ride_id)

        if ride["filled"] or ride["seats_taken"] >= ride["capacity"]:
            raise RideFullException()

        if await self._is_passenger(ride_id, user_id):
            raise AlreadyJoinedException()

        try:
            await self.db.execute(insert(ride_passengers).values(ride_id=ride_id, user_id=user_id))
        except IntegrityError as e:
            await self.db.rollback()
            raise AlreadyJoinedException() from e

        stmt = (
            update(rides)
            .where(and_(rides.c.id == ride_id, rides.c.seats_taken < rides.c.capacity))
            .values(
                seats_taken=rides.c.seats_taken + 1,
                filled=rides.c.seats_taken + 1 >= rides.c.capacity,
                updated_at=datetime.now(UTC),
            )
            .returning(rides)
        )
        result = await self.db.execute(stmt)
        row = result.mappings().first()

        if row is None:
            await self.db.rollback()
            raise RideFullException()

        await self.db.commit()

        joined = RideResponse.model_validate(dict(row))
        logger.info(
            "ride_joined",
            ride_id=str(ride_id),
            user_id=str(user_id),
            seats_taken=joined.seats_taken,
            filled=joined.filled,
        )
        return joined

    async def leave_ride(self, ride_id: UUID, user_id: UUID) -> RideResponse:
        """
        Remove the acting user from a ride and free their seat.

        Raises:
            RideNotFoundException: If the ride does not exist
            NotJoinedException: If the user is not a passenger
        """
        await self._get_ride_row(ride_id)

        if not await self._is_passenger(ride_id, user_id):
            raise NotJoinedException()

        unlink = delete(ride_passengers).where(
            and_(
                ride_passengers.c.ride_id == ride_id,
                ride_passengers.c.user_id == user_id,
            )
        )
        unlinked = await self.db.execute(unlink)

        if unlinked.rowcount == 0:  # type: ignore[attr-defined]
            await self.db.rollback()
            raise NotJoinedException()

        stmt = (
            update(rides)
            .where(rides.c.id == ride_id)
            .values(
                seats_taken=case(
                    (rides.c.seats_taken > 0, rides.c.seats_taken - 1),
                    else_=0,
                ),
                filled=False,
                updated_at=datetime.now(UTC),
            )
            .returning(rides)
        )
        result = await self.db.execute(stmt)
        row = result.mappings().one()
        await self.db.commit()

        left = RideResponse.model_validate(dict(row))
        logger.info(
            "ride_left",
            ride_id=str(ride_id),
            user_id=str(user_id),
            seats_taken=left.seats_taken,
        )
        return left
