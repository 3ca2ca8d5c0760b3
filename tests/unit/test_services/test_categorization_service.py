"""Unit tests for CategorizationService."""

from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from cardrewards.core.exceptions import InvalidCategoryError, TransactionNotFoundError
from cardrewards.services.categorization import CategorizationService
from tests.factories import make_row, make_tx


def correction_row(merchant: str, category: str, amount: str):
    return SimpleNamespace(merchant=SimpleNamespace(name=merchant), user_category=category, amount=Decimal(amount))


@pytest.fixture
def service(mock_db):
    service = CategorizationService(mock_db)
    service.transaction_repo = AsyncMock()
    service.transaction_repo.list_recategorized.return_value = []
    return service


class TestCategorize:
    @pytest.mark.asyncio
    async def test_learns_from_stored_corrections(self, service):
        service.transaction_repo.list_recategorized.return_value = [
            correction_row("Joe's Diner", "Entertainment", amount) for amount in ("20", "25", "30")
        ]

        result = await service.categorize(make_tx(merchant_name="Joe's Diner", mcc="5812", amount=Decimal("24")))

        assert result.category == "Entertainment"

    @pytest.mark.asyncio
    async def test_history_loaded_once(self, service):
        await service.categorize(make_tx())
        await service.suggest(make_tx())
        service.transaction_repo.list_recategorized.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_suggest_respects_limit(self, service):
        suggestions = await service.suggest(make_tx(merchant_name="Costco", mcc="5300"), limit=2)
        assert len(suggestions) == 2


class TestRecordCorrection:
    @pytest.mark.asyncio
    async def test_rejects_unknown_category(self, service):
        with pytest.raises(InvalidCategoryError) as exc_info:
            await service.record_correction(uuid4(), "Shiny Things")
        assert exc_info.value.http_status == 400

    @pytest.mark.asyncio
    async def test_missing_transaction(self, service):
        service.transaction_repo.get_by_id.return_value = None
        with pytest.raises(TransactionNotFoundError):
            await service.record_correction(uuid4(), "Groceries")

    @pytest.mark.asyncio
    async def test_applies_and_learns(self, service, mock_db):
        row = make_row(needs_review=True, category="Dining Out")
        service.transaction_repo.get_by_id.return_value = row

        updated = await service.record_correction(row.id, "Entertainment")

        assert updated.user_category == "Entertainment"
        assert updated.is_recategorized
        assert not updated.needs_review
        assert updated.category == "Dining Out"
        mock_db.commit.assert_awaited_once()
        assert service.history.get("Toast Box").category == "Entertainment"


class TestRecategorizeAll:
    @pytest.mark.asyncio
    async def test_skips_user_categorized(self, service, mock_db):
        corrected = make_row(is_recategorized=True, user_category="Groceries", category="Groceries")
        stale = make_row(category="Groceries", auto_category_confidence=0.5)
        service.transaction_repo.list_page.side_effect = [[corrected, stale], []]

        summary = await service.recategorize_all()

        assert (summary.processed, summary.updated, summary.skipped_user_categorized) == (2, 1, 1)
        assert stale.category == "Dining Out"
        assert corrected.category == "Groceries"
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_dry_run_writes_nothing(self, service, mock_db):
        stale = make_row(category="Groceries", auto_category_confidence=0.5)
        service.transaction_repo.list_page.side_effect = [[stale], []]

        summary = await service.recategorize_all(dry_run=True)

        assert summary.dry_run
        assert summary.updated == 1
        assert stale.category == "Groceries"
        mock_db.commit.assert_not_awaited()
