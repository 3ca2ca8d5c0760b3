"""Integration tests for categorization endpoints."""

import pytest
from httpx import AsyncClient

from cardrewards.api.deps import get_categorization_service
from cardrewards.categorization import HistoricalPatternStore
from cardrewards.services.categorization import CategorizationService


@pytest.fixture
def categorization(app, mock_db):
    service = CategorizationService(mock_db, history=HistoricalPatternStore())
    app.dependency_overrides[get_categorization_service] = lambda: service
    return service


@pytest.mark.asyncio
async def test_categorize(client: AsyncClient, categorization):
    response = await client.post(
        "/api/v1/categorize",
        json={
            "merchant_name": "Shell Station",
            "mcc": "5541",
            "amount": "12.50",
            "occurred_at": "2025-03-10T16:00:00Z",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["category"] == "Fast Food & Takeout"
    assert data["confidence"] == pytest.approx(0.525)
    assert data["needs_review"] is True


@pytest.mark.asyncio
async def test_categorize_without_mcc(client: AsyncClient, categorization):
    response = await client.post("/api/v1/categorize", json={"merchant_name": "Netflix.com", "amount": "15.98"})

    assert response.status_code == 200
    assert response.json()["category"] == "Subscriptions & Memberships"


@pytest.mark.asyncio
async def test_suggestions(client: AsyncClient, categorization):
    response = await client.post(
        "/api/v1/categorize/suggestions?limit=3",
        json={"id": "5b1f0c1e-3a57-4c55-9a3f-0d3f4f0a2b11", "merchant_name": "Costco", "mcc": "5300", "amount": "150"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["transaction_id"] == "5b1f0c1e-3a57-4c55-9a3f-0d3f4f0a2b11"
    assert [s["category"] for s in data["suggestions"]] == ["Groceries", "Home Essentials", "Transportation"]


@pytest.mark.asyncio
async def test_invalid_body_is_val_001(client: AsyncClient, categorization):
    response = await client.post("/api/v1/categorize", json={"amount": "lots"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "VAL_001"
