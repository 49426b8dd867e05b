"""Tests for joining and leaving rides."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from app.core.exceptions import (
    AlreadyJoinedException,
    NotJoinedException,
    RideFullException,
    RideNotFoundException,
)
from app.models.rides import ride_passengers, rides
from app.schemas.rides import RideCreate
from app.services.ride_service import RideService


@pytest.fixture
def ride_create() -> RideCreate:
    return RideCreate(
        from_location="Ithaca",
        to_location="New York",
        time=datetime.now(UTC) + timedelta(days=2),
        description="Direct, no stops",
        car_description="Grey Subaru Outback",
        price=20.0,
        capacity=2,
    )


async def _passenger_count(db_session, ride_id) -> int:
    result = await db_session.execute(
        select(func.count())
        .select_from(ride_passengers)
        .where(ride_passengers.c.ride_id == ride_id)
    )
    return result.scalar_one()


@pytest.mark.asyncio
async def test_ride_fills_up(db_session, make_user, ride_create) -> None:
    """Scenario: capacity 2, two joins fill the ride and a third is refused."""
    driver = await make_user("Driver")
    user_a = await make_user("A")
    user_b = await make_user("B")
    user_c = await make_user("C")

    service = RideService(db_session)
    ride = await service.create_ride(driver["id"], ride_create)
    assert (ride.seats_taken, ride.filled) == (0, False)

    ride = await service.join_ride(ride.id, user_a["id"])
    assert (ride.seats_taken, ride.filled) == (1, False)

    ride = await service.join_ride(ride.id, user_b["id"])
    assert (ride.seats_taken, ride.filled) == (2, True)

    with pytest.raises(RideFullException) as exc_info:
        await service.join_ride(ride.id, user_c["id"])
    assert exc_info.value.message == "Ride is already full."

    # Refused join leaves the ride untouched
    current = await service.get_ride(ride.id)
    assert (current.seats_taken, current.filled) == (2, True)
    assert await _passenger_count(db_session, ride.id) == 2


@pytest.mark.asyncio
async def test_join_twice(db_session, make_user, ride_create) -> None:
    driver = await make_user("Driver")
    rider = await make_user("Rider")

    service = RideService(db_session)
    ride = await service.create_ride(driver["id"], ride_create)
    await service.join_ride(ride.id, rider["id"])

    with pytest.raises(AlreadyJoinedException) as exc_info:
        await service.join_ride(ride.id, rider["id"])
    assert exc_info.value.message == "You have already joined this ride."

    current = await service.get_ride(ride.id)
    assert current.seats_taken == 1


@pytest.mark.asyncio
async def test_join_missing_ride(db_session, make_user) -> None:
    rider = await make_user("Rider")

    with pytest.raises(RideNotFoundException):
        await RideService(db_session).join_ride(uuid4(), rider["id"])


@pytest.mark.asyncio
async def test_leave_ride(db_session, make_user, ride_create) -> None:
    """Test leaving frees the seat and reopens a full ride."""
    driver = await make_user("Driver")
    user_a = await make_user("A")
    user_b = await make_user("B")

    service = RideService(db_session)
    ride = await service.create_ride(driver["id"], ride_create)
    await service.join_ride(ride.id, user_a["id"])
    await service.join_ride(ride.id, user_b["id"])

    ride = await service.leave_ride(ride.id, user_a["id"])
    assert (ride.seats_taken, ride.filled) == (1, False)
    assert await _passenger_count(db_session, ride.id) == 1

    # The freed seat can be taken again
    ride = await service.join_ride(ride.id, user_a["id"])
    assert (ride.seats_taken, ride.filled) == (2, True)


@pytest.mark.asyncio
async def test_leave_ride_not_joined(db_session, make_user, ride_create) -> None:
    driver = await make_user("Driver")
    rider = await make_user("Rider")
    stranger = await make_user("Stranger")

    service = RideService(db_session)
    ride = await service.create_ride(driver["id"], ride_create)
    await service.join_ride(ride.id, rider["id"])

    with pytest.raises(NotJoinedException) as exc_info:
        await service.leave_ride(ride.id, stranger["id"])
    assert exc_info.value.message == "You have not joined this ride."

    current = await service.get_ride(ride.id)
    assert current.seats_taken == 1


@pytest.mark.asyncio
async def test_leave_missing_ride(db_session, make_user) -> None:
    rider = await make_user("Rider")

    with pytest.raises(RideNotFoundException):
        await RideService(db_session).leave_ride(uuid4(), rider["id"])


@pytest.mark.asyncio
async def test_seats_never_exceed_capacity(db_session, make_user, ride_create) -> None:
    """Test the seat invariants over a mixed sequence of joins and leaves."""
    driver = await make_user("Driver")
    riders = [await make_user(f"Rider {i}") for i in range(4)]

    service = RideService(db_session)
    ride = await service.create_ride(driver["id"], ride_create)

    steps = [
        ("join", 0),
        ("join", 1),
        ("join", 2),
        ("leave", 0),
        ("join", 3),
        ("leave", 3),
        ("leave", 1),
        ("join", 0),
        ("leave", 2),
    ]
    for action, index in steps:
        try:
            if action == "join":
                ride = await service.join_ride(ride.id, riders[index]["id"])
                assert ride.filled == (ride.seats_taken >= ride.capacity)
            else:
                ride = await service.leave_ride(ride.id, riders[index]["id"])
        except (RideFullException, NotJoinedException):
            ride = await service.get_ride(ride.id)

        assert 0 <= ride.seats_taken <= ride.capacity
        assert ride.seats_taken == await _passenger_count(db_session, ride.id)


@pytest.mark.asyncio
async def test_join_guard_holds_when_seat_count_is_stale(
    db_session, make_user, ride_create, monkeypatch
) -> None:
    """Test a join racing another join cannot overbook the ride."""
    driver = await make_user("Driver")
    user_a = await make_user("A")
    user_b = await make_user("B")

    service = RideService(db_session)
    ride = await service.create_ride(driver["id"], ride_create.model_copy(update={"capacity": 1}))
    stale_row = await service._get_ride_row(ride.id)

    await service.join_ride(ride.id, user_a["id"])

    # Both requests read the ride before either wrote to it
    async def stale_read(ride_id):
        return stale_row

    monkeypatch.setattr(service, "_get_ride_row", stale_read)

    with pytest.raises(RideFullException):
        await service.join_ride(ride.id, user_b["id"])

    result = await db_session.execute(select(rides).where(rides.c.id == ride.id))
    row = result.mappings().one()
    assert (row["seats_taken"], row["filled"]) == (1, True)
    assert await _passenger_count(db_session, ride.id) == 1


@pytest.mark.asyncio
async def test_duplicate_join_is_refused_by_passenger_key(
    db_session, make_user, ride_create, monkeypatch
) -> None:
    """Test two joins by the same user that both pass the passenger check."""
    driver = await make_user("Driver")
    rider = await make_user("Rider")

    service = RideService(db_session)
    ride = await service.create_ride(driver["id"], ride_create)
    await service.join_ride(ride.id, rider["id"])

    # The second request checked membership before the first one committed
    async def not_yet_joined(ride_id, user_id):
        return False

    monkeypatch.setattr(service, "_is_passenger", not_yet_joined)

    with pytest.raises(AlreadyJoinedException):
        await service.join_ride(ride.id, rider["id"])

    current = await RideService(db_session).get_ride(ride.id)
    assert (current.seats_taken, current.filled) == (1, False)
    assert await _passenger_count(db_session, ride.id) == 1


@pytest.mark.asyncio
async def test_join_and_leave_endpoints(
    client: AsyncClient,
    auth_headers: dict,
    other_auth_headers: dict,
    other_user: dict,
    sample_ride_data: dict,
) -> None:
    """Test the HTTP surface of join and leave, including error responses."""
    created = await client.post("/api/v1/rides", json=sample_ride_data, headers=auth_headers)
    ride_id = created.json()["id"]

    response = await client.post(f"/api/v1/rides/{ride_id}/join", headers=other_auth_headers)
    assert response.status_code == 200
    assert response.json()["seats_taken"] == 1

    response = await client.post(f"/api/v1/rides/{ride_id}/join", headers=other_auth_headers)
    assert response.status_code == 409
    assert response.json() == {
        "error": "AlreadyJoinedException",
        "message": "You have already joined this ride.",
        "path": f"http://test/api/v1/rides/{ride_id}/join",
    }

    joined = await client.get("/api/v1/users/me/joined-rides", headers=other_auth_headers)
    assert [ride["id"] for ride in joined.json()["joined_rides"]] == [ride_id]

    response = await client.post(f"/api/v1/rides/{ride_id}/leave", headers=other_auth_headers)
    assert response.status_code == 200
    assert response.json()["seats_taken"] == 0
    assert response.json()["filled"] is False

    response = await client.post(f"/api/v1/rides/{ride_id}/leave", headers=other_auth_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "You have not joined this ride."


@pytest.mark.asyncio
async def test_join_full_ride_endpoint(
    client: AsyncClient,
    auth_headers: dict,
    other_auth_headers: dict,
    sample_ride_data: dict,
) -> None:
    created = await client.post(
        "/api/v1/rides",
        json={**sample_ride_data, "capacity": 1},
        headers=auth_headers,
    )
    ride_id = created.json()["id"]

    # The driver takes the only seat
    response = await client.post(f"/api/v1/rides/{ride_id}/join", headers=auth_headers)
    assert response.json()["filled"] is True

    response = await client.post(f"/api/v1/rides/{ride_id}/join", headers=other_auth_headers)
    assert response.status_code == 409
    assert response.json()["message"] == "Ride is already full."


@pytest.mark.asyncio
async def test_join_missing_ride_endpoint(client: AsyncClient, auth_headers: dict) -> None:
    response = await client.post(f"/api/v1/rides/{uuid4()}/join", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Ride not found."


@pytest.mark.asyncio
async def test_join_requires_auth(client: AsyncClient) -> None:
    response = await client.post(f"/api/v1/rides/{uuid4()}/join")
    assert response.status_code in (401, 403)
