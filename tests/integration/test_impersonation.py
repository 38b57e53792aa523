"""Integration tests: session state and platform owner impersonation."""

import pytest
from tests.conftest import requires_db

pytestmark = requires_db
from httpx import AsyncClient


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def _enroll(client: AsyncClient, api_base: str, headers: dict, school_id: str) -> dict:
    resp = await client.post(
        f"{api_base}/enrollments",
        headers=headers,
        json={"student_name": "Tobi Adeyemi", "school_id": school_id, "grade": "Basic 1"},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


@pytest.mark.asyncio
async def test_session_reports_own_role(async_client: AsyncClient, api_base: str, guardian: dict):
    resp = await async_client.get(f"{api_base}/session", headers=guardian["headers"])
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["state"] == "authenticated"
    assert data["effective_role"] == "guardian"
    assert data["is_impersonating"] is False


@pytest.mark.asyncio
async def test_owner_acting_as_guardian_sees_only_their_records(
    async_client: AsyncClient, api_base: str, onboarded_school: dict, guardian: dict
):
    owner_headers = onboarded_school["owner"]["headers"]
    activation = await _enroll(async_client, api_base, guardian["headers"], onboarded_school["school_id"])

    resp = await async_client.post(
        f"{api_base}/session/impersonate",
        headers=owner_headers,
        json={"role": "guardian", "account_id": guardian["user_id"]},
    )
    assert resp.status_code == 200, resp.text
    acting = resp.json()["data"]
    assert acting["is_impersonating"] is True
    assert acting["effective_role"] == "guardian"
    assert acting["own_role"] == "platform_owner"
    acting_headers = _bearer(acting["access_token"])

    state = await async_client.get(f"{api_base}/session", headers=acting_headers)
    assert state.json()["data"]["impersonated_account_id"] == guardian["user_id"]

    enrollments = await async_client.get(f"{api_base}/enrollments", headers=acting_headers)
    assert {e["owner_id"] for e in enrollments.json()["data"]} == {guardian["user_id"]}

    # Approval rights follow the stored role, not the acting one
    approved = await async_client.post(f"{api_base}/payments/{activation['id']}/approve", headers=acting_headers)
    assert approved.status_code == 200, approved.text

    exited = await async_client.delete(f"{api_base}/session/impersonate", headers=acting_headers)
    assert exited.status_code == 200
    assert exited.json()["data"]["is_impersonating"] is False
    assert exited.json()["data"]["effective_role"] == "platform_owner"


@pytest.mark.asyncio
async def test_owner_acting_as_school_administrator_is_scoped_to_school(
    async_client: AsyncClient, api_base: str, onboarded_school: dict, guardian: dict
):
    school_id = onboarded_school["school_id"]
    activation = await _enroll(async_client, api_base, guardian["headers"], school_id)

    resp = await async_client.post(
        f"{api_base}/session/impersonate",
        headers=onboarded_school["owner"]["headers"],
        json={"role": "school_administrator", "school_id": school_id},
    )
    assert resp.status_code == 200, resp.text
    acting = resp.json()["data"]
    assert acting["effective_school_id"] == school_id

    pending = await async_client.get(f"{api_base}/payments/pending", headers=_bearer(acting["access_token"]))
    assert [tx["id"] for tx in pending.json()["data"]] == [activation["id"]]


@pytest.mark.asyncio
async def test_school_administrator_cannot_impersonate(
    async_client: AsyncClient, api_base: str, onboarded_school: dict
):
    resp = await async_client.post(
        f"{api_base}/session/impersonate",
        headers=onboarded_school["admin"]["headers"],
        json={"role": "guardian"},
    )
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "ERR_ILLEGAL_TRANSITION"


@pytest.mark.asyncio
async def test_impersonating_unknown_account_is_not_found(
    async_client: AsyncClient, api_base: str, platform_owner: dict
):
    resp = await async_client.post(
        f"{api_base}/session/impersonate",
        headers=platform_owner["headers"],
        json={"role": "guardian", "account_id": "00000000-0000-0000-0000-000000000000"},
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_impersonation_of_deleted_account_is_cleared(
    async_client: AsyncClient, api_base: str, platform_owner: dict, guardian: dict
):
    resp = await async_client.post(
        f"{api_base}/session/impersonate",
        headers=platform_owner["headers"],
        json={"role": "guardian", "account_id": guardian["user_id"]},
    )
    acting_headers = _bearer(resp.json()["data"]["access_token"])

    deleted = await async_client.delete(f"{api_base}/users/{guardian['user_id']}", headers=platform_owner["headers"])
    assert deleted.status_code == 200, deleted.text

    state = await async_client.get(f"{api_base}/session", headers=acting_headers)
    assert state.status_code == 200
    assert state.json()["data"]["is_impersonating"] is False


@pytest.mark.asyncio
async def test_other_guardian_cannot_see_enrollment(
    async_client: AsyncClient, api_base: str, onboarded_school: dict, guardian: dict, unique_suffix: str
):
    await _enroll(async_client, api_base, guardian["headers"], onboarded_school["school_id"])
    mine = (await async_client.get(f"{api_base}/enrollments", headers=guardian["headers"])).json()["data"][0]

    email = f"other_{unique_suffix}@test.example.com"
    signup = await async_client.post(
        f"{api_base}/auth/signup",
        json={"name": "Other Parent", "email": email, "password": "OtherPass123!"},
    )
    other_headers = _bearer(signup.json()["data"]["access_token"])

    resp = await async_client.get(f"{api_base}/enrollments/{mine['id']}", headers=other_headers)
    assert resp.status_code == 404
    listed = await async_client.get(f"{api_base}/enrollments", headers=other_headers)
    assert listed.json()["data"] == []
