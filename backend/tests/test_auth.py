"""
Tests for authentication endpoints: registration, login and /me.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from eventbooking.core.security import create_access_token, decode_access_token
from eventbooking.models.user import User


@pytest.mark.asyncio
async def test_register_user(client: AsyncClient):
    """Successful registration returns the public profile."""
    response = await client.post("/api/auth/register", json={
        "username": "newuser",
        "email": "new@example.com",
        "password": "x",
    })
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "new@example.com"
    assert data["username"] == "newuser"
    assert data["role"] == "user"
    assert data["balance"] == 0
    assert "hashed_password" not in data  # Never expose password hash


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, db_session, test_user):
    """Same email with any username is refused and nothing is stored."""
    response = await client.post("/api/auth/register", json={
        "username": "different",
        "email": "test@example.com",
        "password": "securepassword123",
    })
    assert response.status_code == 409
    assert "already an account" in response.json()["detail"]

    count = (await db_session.execute(select(func.count()).select_from(User))).scalar_one()
    assert count == 1


@pytest.mark.asyncio
async def test_register_duplicate_username(client: AsyncClient, test_user):
    response = await client.post("/api/auth/register", json={
        "username": "testuser",
        "email": "different@example.com",
        "password": "securepassword123",
    })
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_invalid_email(client: AsyncClient):
    response = await client.post("/api/auth/register", json={
        "username": "someone",
        "email": "not-an-email",
        "password": "securepassword123",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_with_email(client: AsyncClient, test_user):
    """Token resolves back to the same user id."""
    response = await client.post("/api/auth/login", json={
        "identifier": "test@example.com",
        "password": "testpassword123",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["id"] == test_user.id

    payload = decode_access_token(data["access_token"])
    assert payload["sub"] == str(test_user.id)
    assert payload["id"] == test_user.id
    assert payload["username"] == "testuser"
    assert payload["email"] == "test@example.com"


@pytest.mark.asyncio
async def test_login_with_username(client: AsyncClient, test_user):
    response = await client.post("/api/auth/login", json={
        "identifier": "testuser",
        "password": "testpassword123",
    })
    assert response.status_code == 200
    assert response.json()["user"]["username"] == "testuser"


@pytest.mark.asyncio
async def test_login_failures_look_identical(client: AsyncClient, test_user):
    """Wrong password and unknown user produce the same response."""
    wrong_password = await client.post("/api/auth/login", json={
        "identifier": "test@example.com",
        "password": "wrongpassword",
    })
    unknown_user = await client.post("/api/auth/login", json={
        "identifier": "nobody@example.com",
        "password": "anypassword123",
    })
    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json()


@pytest.mark.asyncio
async def test_me_returns_current_user(client: AsyncClient, auth_headers, test_user):
    response = await client.get("/api/auth/me", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == test_user.id
    assert "hashed_password" not in data


@pytest.mark.asyncio
async def test_me_without_token(client: AsyncClient):
    response = await client.get("/api/auth/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_with_malformed_token(client: AsyncClient):
    response = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_with_expired_token(client: AsyncClient, test_user):
    token = create_access_token({"sub": str(test_user.id)}, expires_delta=timedelta(seconds=-1))
    response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_for_deleted_user(client: AsyncClient):
    token = create_access_token({"sub": "99999"})
    response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
