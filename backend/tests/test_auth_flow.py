import pytest
from httpx import AsyncClient


async def register(client: AsyncClient, email: str, name: str = "Pat Smith") -> dict:
    response = await client.post(
        "/auth/register",
        json={"email": email, "password": "testpass123", "name": name},
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_register_login_me_logout_flow(client: AsyncClient) -> None:
    register_data = await register(client, "pat@example.com")
    assert register_data["me"]["needs_onboarding"] is True
    assert register_data["me"]["family"] is None
    assert register_data["me"]["member"]["name"] == "Pat Smith"
    assert register_data["me"]["member"]["color"] == "#3B82F6"
    assert register_data["me"]["member"]["role"] == "member"

    login_res = await client.post(
        "/auth/login",
        json={"email": "PAT@example.com", "password": "testpass123"},
    )
    assert login_res.status_code == 200
    login_token = login_res.json()["token"]["access_token"]

    token_res = await client.post(
        "/auth/token",
        data={"username": "pat@example.com", "password": "testpass123"},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert token_res.status_code == 200
    oauth_token = token_res.json()["access_token"]

    me_res = await client.get("/auth/me", headers={"Authorization": f"Bearer {oauth_token}"})
    assert me_res.status_code == 200
    assert me_res.json()["member"]["email"] == "pat@example.com"

    logout_res = await client.post(
        "/auth/logout",
        headers={"Authorization": f"Bearer {login_token}"},
    )
    assert logout_res.status_code == 200

    revoked_res = await client.get("/auth/me", headers={"Authorization": f"Bearer {login_token}"})
    assert revoked_res.status_code == 401

    # Signing out one session leaves the others usable.
    other_res = await client.get("/auth/me", headers={"Authorization": f"Bearer {oauth_token}"})
    assert other_res.status_code == 200


@pytest.mark.asyncio
async def test_register_rejects_duplicate_email_and_bad_color(client: AsyncClient) -> None:
    await register(client, "dupe@example.com")

    dupe_res = await client.post(
        "/auth/register",
        json={"email": "dupe@example.com", "password": "testpass123", "name": "Again"},
    )
    assert dupe_res.status_code == 409

    color_res = await client.post(
        "/auth/register",
        json={
            "email": "color@example.com",
            "password": "testpass123",
            "name": "Colorful",
            "color": "#123456",
        },
    )
    assert color_res.status_code == 422


@pytest.mark.asyncio
async def test_login_with_wrong_password_is_rejected(client: AsyncClient) -> None:
    await register(client, "wrong@example.com")
    response = await client.post(
        "/auth/login",
        json={"email": "wrong@example.com", "password": "not-the-password"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_family_scoped_routes_require_a_family(client: AsyncClient) -> None:
    data = await register(client, "onboarding@example.com")
    headers = {"Authorization": f"Bearer {data['token']['access_token']}"}

    for path in ("/tasks/lists", "/calendar/events", "/messages", "/dashboard"):
        response = await client.get(path, headers=headers)
        assert response.status_code == 409
        assert response.json()["detail"] == "Create or join a family first."


@pytest.mark.asyncio
async def test_missing_or_garbage_token_is_unauthorized(client: AsyncClient) -> None:
    assert (await client.get("/auth/me")).status_code == 401
    garbage = await client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert garbage.status_code == 401
