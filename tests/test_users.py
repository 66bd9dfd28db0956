"""
Tests for the current-user profile endpoints.
"""

import httpx


async def test_get_profile(client: httpx.AsyncClient, auth_headers):
    response = await client.get("/api/v1/user", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"username": "testuser", "email": "test@example.com"}


async def test_update_profile(client: httpx.AsyncClient, auth_headers):
    """Test username and email changes are persisted."""
    response = await client.put(
        "/api/v1/user",
        headers=auth_headers,
        json={"username": "renamed", "email": "renamed@example.com"}
    )

    assert response.status_code == 200
    assert response.json() == {"username": "renamed", "email": "renamed@example.com"}


async def test_update_profile_requires_a_field(client: httpx.AsyncClient, auth_headers):
    response = await client.put("/api/v1/user", headers=auth_headers, json={})

    assert response.status_code == 400


async def test_update_profile_duplicate(client: httpx.AsyncClient, auth_headers, other_user):
    response = await client.put(
        "/api/v1/user",
        headers=auth_headers,
        json={"email": "other@example.com"}
    )

    assert response.status_code == 409


async def test_update_password(client: httpx.AsyncClient, auth_headers, login_as):
    response = await client.put(
        "/api/v1/user",
        headers=auth_headers,
        json={"password": "changed-password"}
    )
    assert response.status_code == 200

    assert await login_as("test@example.com", "changed-password")


async def test_update_password_too_short(client: httpx.AsyncClient, auth_headers):
    response = await client.put("/api/v1/user", headers=auth_headers, json={"password": "short"})

    assert response.status_code == 400


async def test_delete_profile(client: httpx.AsyncClient, auth_headers):
    """Test a deleted user's token no longer resolves."""
    response = await client.delete("/api/v1/user", headers=auth_headers)
    assert response.status_code == 200

    response = await client.get("/api/v1/user", headers=auth_headers)
    assert response.status_code == 401


async def test_update_profile_short_username(client: httpx.AsyncClient, auth_headers):
    """Usernames follow the same length rule as registration."""
    response = await client.put("/api/v1/user", headers=auth_headers, json={"username": "ab"})

    assert response.status_code == 422

    response = await client.get("/api/v1/user", headers=auth_headers)
    assert response.json()["username"] == "testuser"
