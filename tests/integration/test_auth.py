"""Integration tests: signup, login, logout and profile."""

import pytest
from tests.conftest import requires_db

pytestmark = requires_db
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_signup_returns_tokens(async_client: AsyncClient, api_base: str, unique_suffix: str):
    resp = await async_client.post(
        f"{api_base}/auth/signup",
        json={
            "name": "New Parent",
            "email": f"new_{unique_suffix}@test.example.com",
            "password": "NewPass123!",
        },
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    assert data["role"] == "guardian"
    assert data["access_token"]
    assert data["refresh_token"]


@pytest.mark.asyncio
async def test_signup_cannot_create_platform_owner(async_client: AsyncClient, api_base: str, unique_suffix: str):
    resp = await async_client.post(
        f"{api_base}/auth/signup",
        json={
            "name": "Sneaky",
            "email": f"sneaky_{unique_suffix}@test.example.com",
            "password": "Sneaky123!",
            "role": "platform_owner",
        },
    )
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_school_administrator_signup_needs_school(
    async_client: AsyncClient, api_base: str, unique_suffix: str
):
    resp = await async_client.post(
        f"{api_base}/auth/signup",
        json={
            "name": "Bursar",
            "email": f"bursar_nos_{unique_suffix}@test.example.com",
            "password": "Bursar123!",
            "role": "school_administrator",
        },
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_duplicate_email_is_rejected(async_client: AsyncClient, api_base: str, guardian: dict):
    resp = await async_client.post(
        f"{api_base}/auth/signup",
        json={"name": "Again", "email": guardian["email"], "password": "Again123!"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "ERR_INVALID_INPUT"


@pytest.mark.asyncio
async def test_login_wrong_password(async_client: AsyncClient, api_base: str, guardian: dict):
    resp = await async_client.post(
        f"{api_base}/auth/login",
        json={"email": guardian["email"], "password": "wrong-password"},
    )
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "ERR_AUTH"


@pytest.mark.asyncio
async def test_profile_and_update(async_client: AsyncClient, api_base: str, guardian: dict):
    resp = await async_client.get(f"{api_base}/users/me", headers=guardian["headers"])
    assert resp.status_code == 200
    assert resp.json()["data"]["email"] == guardian["email"]

    resp = await async_client.patch(
        f"{api_base}/users/me",
        headers=guardian["headers"],
        json={"phone_number": "+2348000000000"},
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["phone_number"] == "+2348000000000"


@pytest.mark.asyncio
async def test_logout_revokes_issued_tokens(async_client: AsyncClient, api_base: str, guardian: dict):
    resp = await async_client.post(f"{api_base}/auth/logout", headers=guardian["headers"])
    assert resp.status_code == 200
    assert resp.json()["data"]["state"] == "logged_out"

    resp = await async_client.get(f"{api_base}/users/me", headers=guardian["headers"])
    assert resp.status_code == 401

    # A fresh login works again
    resp = await async_client.post(
        f"{api_base}/auth/login",
        json={"email": guardian["email"], "password": guardian["password"]},
    )
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_garbage_token_is_rejected(async_client: AsyncClient, api_base: str):
    resp = await async_client.get(f"{api_base}/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
