"""Integration tests for the simulation endpoint."""

from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from httpx import AsyncClient

from cardrewards.api.deps import get_reward_service
from cardrewards.core.exceptions import PaymentMethodNotFoundError
from cardrewards.rewards import BonusPointsLedger, InMemoryLedgerStore, KeyedLocks, RewardCalculator
from cardrewards.services.rewards import RewardService


@pytest.fixture
def ledger_store():
    return InMemoryLedgerStore()


@pytest.fixture
def reward_service(app, mock_db, uob_platinum, ledger_store):
    locks = KeyedLocks()
    service = RewardService(mock_db, locks, categorization=AsyncMock())
    service.payment_method_repo = AsyncMock()
    service.payment_method_repo.get_instrument.return_value = uob_platinum
    service.transaction_repo = AsyncMock()
    service.transaction_repo.list_in_period.return_value = []
    service.calculator = RewardCalculator(BonusPointsLedger(ledger_store, locks), service.transaction_repo)
    app.dependency_overrides[get_reward_service] = lambda: service
    return service


@pytest.mark.asyncio
async def test_simulate_contactless(client: AsyncClient, reward_service, uob_platinum, ledger_store):
    response = await client.post(
        "/api/v1/rewards/simulate",
        json={"instrument_id": str(uob_platinum.id), "amount": "23.00", "is_contactless": True},
    )

    assert response.status_code == 200
    data = response.json()
    assert (data["base_points"], data["bonus_points"], data["total_points"]) == (8, 72, 80)
    assert data["remaining_monthly_bonus_points"] == 3928
    assert data["ledger_recorded"] is False
    assert ledger_store.entries == []


@pytest.mark.asyncio
async def test_simulate_unknown_payment_method(app, client: AsyncClient):
    service = AsyncMock()
    service.simulate.side_effect = PaymentMethodNotFoundError()
    app.dependency_overrides[get_reward_service] = lambda: service

    response = await client.post("/api/v1/rewards/simulate", json={"instrument_id": str(uuid4()), "amount": "10"})

    assert response.status_code == 404
    assert response.json()["error_code"] == "API_001"


@pytest.mark.asyncio
async def test_simulate_rejects_non_positive_amount(client: AsyncClient, reward_service, uob_platinum):
    response = await client.post(
        "/api/v1/rewards/simulate",
        json={"instrument_id": str(uob_platinum.id), "amount": str(Decimal("0"))},
    )

    assert response.status_code == 400
    assert response.json()["error_code"] == "VAL_001"
