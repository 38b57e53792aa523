"""Integration tests: school onboarding, fee schedules and cascade deletes."""

from decimal import Decimal

import pytest
from tests.conftest import requires_db

pytestmark = requires_db
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_schools_are_listed_publicly(async_client: AsyncClient, api_base: str, onboarded_school: dict):
    resp = await async_client.get(f"{api_base}/schools")
    assert resp.status_code == 200
    assert onboarded_school["school_id"] in [s["id"] for s in resp.json()["data"]]


@pytest.mark.asyncio
async def test_only_owner_can_onboard(async_client: AsyncClient, api_base: str, guardian: dict):
    resp = await async_client.post(
        f"{api_base}/schools",
        headers=guardian["headers"],
        json={
            "name": "Not Allowed Academy",
            "admin_name": "X",
            "admin_email": "x@test.example.com",
            "admin_password": "Secret123!",
            "fee_schedule": {},
        },
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_fee_schedule_read_and_publish(async_client: AsyncClient, api_base: str, onboarded_school: dict):
    school_id = onboarded_school["school_id"]
    admin_headers = onboarded_school["admin"]["headers"]

    resp = await async_client.get(f"{api_base}/schools/{school_id}/fees")
    assert resp.status_code == 200
    assert Decimal(resp.json()["data"]["fees"]["Basic 1"]) == Decimal("120000")

    resp = await async_client.put(
        f"{api_base}/schools/{school_id}/fees",
        headers=admin_headers,
        json={"grade": "JSS1", "amount": "180000"},
    )
    assert resp.status_code == 200, resp.text
    fees = resp.json()["data"]["fees"]
    assert Decimal(fees["JSS1"]) == Decimal("180000")
    assert Decimal(fees["Basic 1"]) == Decimal("120000")

    resp = await async_client.delete(f"{api_base}/schools/{school_id}/fees/JSS1", headers=admin_headers)
    assert resp.status_code == 200
    assert "JSS1" not in resp.json()["data"]["fees"]

    resp = await async_client.delete(f"{api_base}/schools/{school_id}/fees/JSS1", headers=admin_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_guardian_cannot_publish_fees(
    async_client: AsyncClient, api_base: str, onboarded_school: dict, guardian: dict
):
    resp = await async_client.put(
        f"{api_base}/schools/{onboarded_school['school_id']}/fees",
        headers=guardian["headers"],
        json={"grade": "JSS1", "amount": "1"},
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_deleting_school_removes_its_enrollments(
    async_client: AsyncClient, api_base: str, onboarded_school: dict, guardian: dict
):
    school_id = onboarded_school["school_id"]
    resp = await async_client.post(
        f"{api_base}/enrollments",
        headers=guardian["headers"],
        json={"student_name": "Kemi", "school_id": school_id, "grade": "Basic 1"},
    )
    assert resp.status_code == 200, resp.text

    resp = await async_client.delete(f"{api_base}/schools/{school_id}", headers=onboarded_school["owner"]["headers"])
    assert resp.status_code == 200, resp.text
    deleted = resp.json()["data"]["deleted"]
    assert deleted["enrollments"] == 1
    assert deleted["transactions"] == 1

    assert (await async_client.get(f"{api_base}/enrollments", headers=guardian["headers"])).json()["data"] == []
    assert (await async_client.get(f"{api_base}/payments", headers=guardian["headers"])).json()["data"] == []

    # The administrator account survives without an affiliation
    me = await async_client.get(f"{api_base}/users/me", headers=onboarded_school["admin"]["headers"])
    assert me.status_code == 200
    assert me.json()["data"]["school_id"] is None


@pytest.mark.asyncio
async def test_guardian_deletes_own_enrollment(
    async_client: AsyncClient, api_base: str, onboarded_school: dict, guardian: dict
):
    await async_client.post(
        f"{api_base}/enrollments",
        headers=guardian["headers"],
        json={"student_name": "Kemi", "school_id": onboarded_school["school_id"], "grade": "Basic 1"},
    )
    enrollment = (await async_client.get(f"{api_base}/enrollments", headers=guardian["headers"])).json()["data"][0]

    resp = await async_client.delete(f"{api_base}/enrollments/{enrollment['id']}", headers=guardian["headers"])
    assert resp.status_code == 200
    assert resp.json()["data"]["deleted"]["transactions"] == 1

    resp = await async_client.get(f"{api_base}/enrollments/{enrollment['id']}", headers=guardian["headers"])
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_owner_cannot_delete_self(async_client: AsyncClient, api_base: str, platform_owner: dict):
    resp = await async_client.delete(
        f"{api_base}/users/{platform_owner['user_id']}", headers=platform_owner["headers"]
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_deleted_account_tokens_stop_working(
    async_client: AsyncClient, api_base: str, platform_owner: dict, guardian: dict
):
    resp = await async_client.delete(f"{api_base}/users/{guardian['user_id']}", headers=platform_owner["headers"])
    assert resp.status_code == 200

    resp = await async_client.get(f"{api_base}/users/me", headers=guardian["headers"])
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_broadcast_reaches_every_account(
    async_client: AsyncClient, api_base: str, platform_owner: dict, guardian: dict, unique_suffix: str
):
    title = f"Holiday notice {unique_suffix}"
    resp = await async_client.post(
        f"{api_base}/notifications/broadcast",
        headers=platform_owner["headers"],
        json={"title": title, "message": "Offices close on Friday."},
    )
    assert resp.status_code == 200, resp.text

    inbox = await async_client.get(f"{api_base}/notifications", headers=guardian["headers"])
    assert title in [n["title"] for n in inbox.json()["data"]]

    denied = await async_client.post(
        f"{api_base}/notifications/broadcast",
        headers=guardian["headers"],
        json={"title": "Nope", "message": "Nope"},
    )
    assert denied.status_code == 403


@pytest.mark.asyncio
async def test_broadcast_read_state_is_per_account(
    async_client: AsyncClient, api_base: str, platform_owner: dict, guardian: dict, unique_suffix: str
):
    title = f"Fees reminder {unique_suffix}"
    resp = await async_client.post(
        f"{api_base}/notifications/broadcast",
        headers=platform_owner["headers"],
        json={"title": title, "message": "Second term fees are due."},
    )
    notification_id = resp.json()["data"]["id"]

    resp = await async_client.patch(f"{api_base}/notifications/{notification_id}/read", headers=guardian["headers"])
    assert resp.status_code == 200, resp.text
    assert resp.json()["data"]["read"] is True

    unread = await async_client.get(f"{api_base}/notifications?unread_only=true", headers=guardian["headers"])
    assert notification_id not in [n["id"] for n in unread.json()["data"]]

    signup = await async_client.post(
        f"{api_base}/auth/signup",
        json={"name": "Other Parent", "email": f"reader_{unique_suffix}@test.example.com", "password": "OtherPass123!"},
    )
    other_headers = {"Authorization": f"Bearer {signup.json()['data']['access_token']}"}
    unread = await async_client.get(f"{api_base}/notifications?unread_only=true", headers=other_headers)
    listed = {n["id"]: n["read"] for n in unread.json()["data"]}
    assert listed[notification_id] is False

    # Deleting the reader removes its read marks with it
    resp = await async_client.delete(f"{api_base}/users/{guardian['user_id']}", headers=platform_owner["headers"])
    assert resp.status_code == 200, resp.text
    assert resp.json()["data"]["deleted"]["notification_reads"] == 1
