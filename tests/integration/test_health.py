"""Integration tests: Health and root endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from schoolpay.main import app


@pytest.mark.asyncio
async def test_health():
    """Health endpoint at /health."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"


@pytest.mark.asyncio
async def test_root_points_at_docs():
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json()["docs"] == "/docs"


@pytest.mark.asyncio
async def test_plan_quote_needs_no_database():
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        resp = await client.post("/api/v1/plans/quote", json={"total_fee": "120000", "fee_type": "Term"})
    assert resp.status_code == 200
    quote = resp.json()["data"]
    assert float(quote["deposit_amount"]) == 30000
    assert float(quote["platform_fee_amount"]) == 3000
    assert [option["type"] for option in quote["options"]] == ["Weekly", "Monthly"]


@pytest.mark.asyncio
async def test_validation_errors_use_envelope():
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        resp = await client.post("/api/v1/plans/quote", json={"fee_type": "Term"})
    assert resp.status_code == 422
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["code"] == "ERR_VALIDATION"
