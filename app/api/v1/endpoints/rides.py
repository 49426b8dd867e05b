"""Ride endpoints."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Query, status

from app.dependencies import CurrentUser, DatabaseSession
from app.schemas.rides import RideCreate, RideResponse, RideSearch, RideUpdate
from app.services.ride_service import RideService

router = APIRouter(prefix="/rides", tags=["Rides"])


@router.get(
    "",
    response_model=list[RideResponse],
    summary="List all rides",
)
async def list_rides(db: DatabaseSession) -> list[RideResponse]:
    """Return every ride, unfiltered and unpaginated."""
    return await RideService(db).list_rides()


@router.get(
    "/search",
    response_model=list[RideResponse],
    summary="Search rides",
)
async def search_rides(
    db: DatabaseSession,
    from_location: str = Query(..., min_length=1),
    to_location: str = Query(..., min_length=1),
    date: datetime = Query(..., description="Earliest departure time"),
) -> list[RideResponse]:
    """
    Search rides by exact origin and destination.

    Args:
        db: Database session
        from_location: Starting location
        to_location: Destination
        date: Only rides departing at or after this time are returned

    Returns:
        Matching rides, earliest departure first
    """
    criteria = RideSearch(from_location=from_location, to_location=to_location, date=date)
    return await RideService(db).search_rides(criteria)


@router.get(
    "/mine",
    response_model=list[RideResponse],
    summary="List rides driven by the current user",
)
async def list_my_rides(current_user: CurrentUser, db: DatabaseSession) -> list[RideResponse]:
    """Return the rides where the current user is the driver."""
    return await RideService(db).list_rides_by_driver(current_user["id"])


@router.post(
    "",
    response_model=RideResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post a new ride",
)
async def create_ride(
    data: RideCreate,
    current_user: CurrentUser,
    db: DatabaseSession,
) -> RideResponse:
    """Post a ride with the current user as driver."""
    return await RideService(db).create_ride(current_user["id"], data)


@router.get(
    "/{ride_id}",
    response_model=RideResponse,
    summary="Get ride by ID",
)
async def get_ride(ride_id: UUID, db: DatabaseSession) -> RideResponse:
    """Get a specific ride by ID."""
    return await RideService(db).get_ride(ride_id)


@router.put(
    "/{ride_id}",
    response_model=RideResponse,
    summary="Update ride",
)
async def update_ride(
    ride_id: UUID,
    data: RideUpdate,
    current_user: CurrentUser,
    db: DatabaseSession,
) -> RideResponse:
    """
    Overwrite the details of a ride the current user drives.

    Args:
        ride_id: Ride ID
        data: Replacement ride details
        current_user: Authenticated user
        db: Database session

    Returns:
        Updated ride
    """
    return await RideService(db).update_ride(ride_id, current_user["id"], data)


@router.post(
    "/{ride_id}/join",
    response_model=RideResponse,
    summary="Join a ride",
)
async def join_ride(
    ride_id: UUID,
    current_user: CurrentUser,
    db: DatabaseSession,
) -> RideResponse:
    """
    Take a seat on a ride.

    Fails with 404 if the ride does not exist, and with 409 if it is full or
    the current user already joined it.
    """
    return await RideService(db).join_ride(ride_id, current_user["id"])


@router.post(
    "/{ride_id}/leave",
    response_model=RideResponse,
    summary="Leave a ride",
)
async def leave_ride(
    ride_id: UUID,
    current_user: CurrentUser,
    db: DatabaseSession,
) -> RideResponse:
    """
    Give up a seat on a ride.

    Fails with 404 if the ride does not exist, and with 400 if the current
    user has not joined it.
    """
    return await RideService(db).leave_ride(ride_id, current_user["id"])
