"""Unit tests for RewardService."""

from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from cardrewards.core.exceptions import (
    InvalidCategoryError,
    PaymentMethodNotFoundError,
    TransactionNotFoundError,
    ValidationError,
)
from cardrewards.rewards import BonusPointsLedger, InMemoryLedgerStore, KeyedLocks, RewardCalculator
from cardrewards.schemas.categorization import CategoryResult
from cardrewards.schemas.rewards import SimulationRequest
from cardrewards.services.rewards import RewardService
from tests.factories import make_row, make_tx


@pytest.fixture
def categorization():
    service = AsyncMock()
    service.categorize.return_value = CategoryResult(
        category="Dining Out", confidence=0.9, reason="MCC 5812", needs_review=False
    )
    return service


@pytest.fixture
def ledger_store():
    return InMemoryLedgerStore()


@pytest.fixture
def service(mock_db, categorization, ledger_store, uob_platinum):
    locks = KeyedLocks()
    service = RewardService(mock_db, locks, categorization=categorization)
    service.transaction_repo = AsyncMock()
    service.transaction_repo.list_in_period.return_value = []
    service.transaction_repo.upsert.side_effect = lambda tx: tx
    service.transaction_repo.update.side_effect = lambda id, fields: SimpleNamespace(**{"id": id, "category": None, **fields})
    service.payment_method_repo = AsyncMock()
    service.payment_method_repo.get_instrument.return_value = uob_platinum
    service.calculator = RewardCalculator(
        BonusPointsLedger(ledger_store, locks), service.transaction_repo
    )
    return service


class TestSaveTransaction:
    @pytest.mark.asyncio
    async def test_categorizes_and_prices(self, service, categorization, uob_platinum):
        tx = make_tx(instrument_id=uob_platinum.id, is_contactless=True)

        transaction, breakdown = await service.save_transaction(tx)

        categorization.categorize.assert_awaited_once()
        saved = service.transaction_repo.upsert.call_args.args[0]
        assert saved.category == "Dining Out"
        assert transaction.category == "Dining Out"
        assert transaction.auto_category_confidence == 0.9
        assert (transaction.base_points, transaction.bonus_points, transaction.total_points) == (8, 72, 80)
        assert breakdown.ledger_recorded

    @pytest.mark.asyncio
    async def test_user_category_is_kept(self, service, categorization, uob_platinum):
        tx = make_tx(instrument_id=uob_platinum.id, user_category="Entertainment")

        transaction, _ = await service.save_transaction(tx)

        categorization.categorize.assert_not_awaited()
        saved = service.transaction_repo.upsert.call_args.args[0]
        assert saved.is_recategorized
        assert transaction.needs_review is False

    @pytest.mark.asyncio
    async def test_rejects_unknown_user_category(self, service, uob_platinum):
        with pytest.raises(InvalidCategoryError):
            await service.save_transaction(make_tx(instrument_id=uob_platinum.id, user_category="Nope"))
        service.transaction_repo.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_payment_method(self, service):
        service.payment_method_repo.get_instrument.return_value = None
        with pytest.raises(PaymentMethodNotFoundError) as exc_info:
            await service.save_transaction(make_tx(instrument_id=uuid4()))
        assert exc_info.value.error_code == "API_001"

    @pytest.mark.asyncio
    async def test_missing_amount_is_rejected(self, service, uob_platinum):
        with pytest.raises(ValidationError) as exc_info:
            await service.save_transaction(make_tx(instrument_id=uob_platinum.id, amount=None))
        assert exc_info.value.error_code == "VAL_001"
        assert exc_info.value.details == {"missing": ["amount"]}
        service.transaction_repo.upsert.assert_not_awaited()


class TestCalculateForTransaction:
    @pytest.mark.asyncio
    async def test_stores_points(self, service, ledger_store, uob_platinum):
        tx = make_tx(instrument_id=uob_platinum.id, is_contactless=True)
        service.transaction_repo.get.return_value = tx

        breakdown = await service.calculate_for_transaction(tx.id)

        assert breakdown.total_points == 80
        service.transaction_repo.update.assert_awaited_once_with(
            tx.id,
            {"base_points": 8, "bonus_points": 72, "total_points": 80, "points_provisional": False},
        )
        assert [entry.bonus_points for entry in ledger_store.entries] == [72]

    @pytest.mark.asyncio
    async def test_missing_transaction(self, service):
        service.transaction_repo.get.return_value = None
        with pytest.raises(TransactionNotFoundError):
            await service.calculate_for_transaction(uuid4())


class TestSimulate:
    @pytest.mark.asyncio
    async def test_does_not_touch_ledger(self, service, ledger_store, uob_platinum):
        request = SimulationRequest(instrument_id=uob_platinum.id, amount=Decimal("23"), is_contactless=True)

        breakdown = await service.simulate(request)

        assert breakdown.total_points == 80
        assert ledger_store.entries == []


class TestDeleteTransaction:
    @pytest.mark.asyncio
    async def test_reverses_and_soft_deletes(self, service, ledger_store, uob_platinum):
        tx = make_tx(instrument_id=uob_platinum.id, is_contactless=True)
        await service.save_transaction(tx)
        service.transaction_repo.get.return_value = tx

        await service.delete_transaction(tx.id)

        assert sum(entry.bonus_points for entry in ledger_store.entries) == 0
        service.transaction_repo.soft_delete.assert_awaited_once_with(tx.id)

    @pytest.mark.asyncio
    async def test_missing_transaction(self, service):
        service.transaction_repo.get.return_value = None
        with pytest.raises(TransactionNotFoundError):
            await service.delete_transaction(uuid4())


class TestRecompute:
    @pytest.mark.asyncio
    async def test_summarizes_and_updates_rows(self, service, mock_db, uob_platinum):
        rows = [
            make_row(payment_method_id=uob_platinum.id, amount=Decimal("1000")),
            make_row(payment_method_id=uob_platinum.id, amount=Decimal("1000")),
        ]
        service.transaction_repo.list_for_instrument.return_value = rows

        summary = await service.recompute_instrument(uob_platinum.id)

        assert summary.transactions == 2
        assert summary.bonus_points == 4000
        assert summary.base_points == 800
        assert summary.total_points == 4800
        assert sorted(row.bonus_points for row in rows) == [400, 3600]
        mock_db.commit.assert_awaited()
