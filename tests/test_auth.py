"""Tests for Firebase sign-in and token endpoints."""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from app.core.security import create_refresh_token, decode_access_token
from app.models.users import users

FIREBASE_CLAIMS = {
    "uid": "firebase-uid-123",
    "email": "casey@example.com",
    "email_verified": True,
    "name": "Casey Commuter",
    "picture": "https://images.example.com/casey.png",
}


@pytest.mark.asyncio
async def test_first_sign_in_creates_user(client: AsyncClient, db_session) -> None:
    """Test that verifying a Firebase token creates the user and issues tokens."""
    with patch(
        "app.services.auth_service.verify_firebase_token",
        new=AsyncMock(return_value=FIREBASE_CLAIMS),
    ):
        response = await client.post(
            "/api/v1/auth/firebase/verify",
            json={"id_token": "firebase-id-token"},
        )

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == "casey@example.com"
    assert data["user"]["name"] == "Casey Commuter"
    assert data["user"]["image"] == "https://images.example.com/casey.png"

    payload = decode_access_token(data["access_token"])
    assert payload is not None
    assert payload["sub"] == data["user"]["id"]

    # The issued token works against protected endpoints
    me = await client.get(
        "/api/v1/users/me",
        headers={"Authorization": f"Bearer {data['access_token']}"},
    )
    assert me.status_code == 200
    assert me.json()["id"] == data["user"]["id"]


@pytest.mark.asyncio
async def test_repeat_sign_in_reuses_user(client: AsyncClient, db_session) -> None:
    with patch(
        "app.services.auth_service.verify_firebase_token",
        new=AsyncMock(return_value=FIREBASE_CLAIMS),
    ):
        first = await client.post("/api/v1/auth/firebase/verify", json={"id_token": "t1"})
        second = await client.post("/api/v1/auth/firebase/verify", json={"id_token": "t2"})

    assert first.json()["user"]["id"] == second.json()["user"]["id"]

    result = await db_session.execute(select(func.count()).select_from(users))
    assert result.scalar_one() == 1


@pytest.mark.asyncio
async def test_first_sign_in_with_taken_email(
    client: AsyncClient, db_session, make_user
) -> None:
    """Test a new Firebase identity cannot claim another account's email."""
    await make_user("Existing", email=FIREBASE_CLAIMS["email"])

    with patch(
        "app.services.auth_service.verify_firebase_token",
        new=AsyncMock(return_value=FIREBASE_CLAIMS),
    ):
        response = await client.post("/api/v1/auth/firebase/verify", json={"id_token": "t1"})

    assert response.status_code == 409
    assert response.json()["message"] == "Email is already in use"

    result = await db_session.execute(select(func.count()).select_from(users))
    assert result.scalar_one() == 1


@pytest.mark.asyncio
async def test_invalid_firebase_token(client: AsyncClient) -> None:
    with patch(
        "app.services.auth_service.verify_firebase_token",
        new=AsyncMock(side_effect=ValueError("Invalid Firebase ID token: expired")),
    ):
        response = await client.post("/api/v1/auth/firebase/verify", json={"id_token": "bad"})

    assert response.status_code == 401
    assert response.json()["error"] == "UnauthorizedException"


@pytest.mark.asyncio
async def test_firebase_token_without_email(client: AsyncClient) -> None:
    claims = {"uid": "firebase-uid-456"}
    with patch(
        "app.services.auth_service.verify_firebase_token",
        new=AsyncMock(return_value=claims),
    ):
        response = await client.post("/api/v1/auth/firebase/verify", json={"id_token": "t"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_refresh_token(client: AsyncClient, test_user: dict) -> None:
    refresh_token = create_refresh_token(data={"sub": str(test_user["id"])})

    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
    assert response.status_code == 200
    payload = decode_access_token(response.json()["access_token"])
    assert payload["sub"] == str(test_user["id"])


@pytest.mark.asyncio
async def test_access_token_cannot_refresh(client: AsyncClient, auth_headers: dict) -> None:
    access_token = auth_headers["Authorization"].removeprefix("Bearer ")

    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": access_token})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_refresh_token(
    client: AsyncClient,
    test_user: dict,
    mock_redis,
) -> None:
    refresh_token = create_refresh_token(data={"sub": str(test_user["id"])})

    response = await client.post("/api/v1/auth/logout", json={"refresh_token": refresh_token})
    assert response.status_code == 204
    mock_redis.setex.assert_called_once()
    assert mock_redis.setex.call_args.args[0] == f"blacklist:{refresh_token}"

    mock_redis.exists.return_value = 1
    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
    assert response.status_code == 401
    assert response.json()["message"] == "Token has been revoked"
