"""
Tests for user profile endpoints and the health check.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_balance(client: AsyncClient, auth_headers):
    response = await client.get("/api/user/balance", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"balance": 0}


@pytest.mark.asyncio
async def test_balance_requires_auth(client: AsyncClient):
    response = await client.get("/api/user/balance")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_organized_events(client: AsyncClient, auth_headers, other_user, event_factory):
    await event_factory(title="Mine")
    await event_factory(title="Theirs", organizer=other_user)

    response = await client.get("/api/user/events", headers=auth_headers)
    assert response.status_code == 200
    assert [e["title"] for e in response.json()["events"]] == ["Mine"]


@pytest.mark.asyncio
async def test_public_profile(client: AsyncClient, test_user):
    response = await client.get(f"/api/user/{test_user.id}")
    assert response.status_code == 200
    data = response.json()
    assert data["username"] == "testuser"
    assert "hashed_password" not in data
    assert "email" not in data


@pytest.mark.asyncio
async def test_public_profile_not_found(client: AsyncClient):
    response = await client.get("/api/user/99999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["server"] == "running"
    assert data["database"] == "connected"
    assert data["cache"] == {"status": "disabled"}
    assert "X-Request-ID" in response.headers
