"""Categorization service: the classifier over stored transactions."""
import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from cardrewards.categorization import (
    CategoryClassifier,
    Correction,
    HistoricalPatternStore,
    is_valid_category,
)
from cardrewards.config import settings
from cardrewards.core.exceptions import InvalidCategoryError, TransactionNotFoundError
from cardrewards.models.transaction import Transaction
from cardrewards.repositories.transaction import TransactionRepository
from cardrewards.schemas.categorization import (
    CategoryResult,
    CategorySuggestion,
    RecategorizationSummary,
)
from cardrewards.schemas.transaction import TransactionSnapshot

logger = logging.getLogger(__name__)


def category_fields(result: CategoryResult) -> dict:
    """Transaction columns set from a classifier result."""
    return {
        "category": result.category,
        "auto_category_confidence": result.confidence,
        "needs_review": result.needs_review,
        "category_suggestion_reason": result.reason[:255] if result.reason else None,
    }


class CategorizationService:
    """Service layer for transaction categorization."""

    def __init__(self, db: AsyncSession, history: HistoricalPatternStore | None = None):
        """Initialize categorization service with database session.

        Args:
            db: Database session
            history: Learned merchant patterns; loaded from past corrections
                on first use when not given
        """
        self.db = db
        self.transaction_repo = TransactionRepository(db)
        self.history = history if history is not None else HistoricalPatternStore()
        self.classifier = CategoryClassifier(history=self.history)
        self._history_loaded = history is not None

    async def load_history(self) -> int:
        """Rebuild merchant patterns from the user's recent corrections.

        Returns:
            Number of merchants with a usable pattern
        """
        rows = await self.transaction_repo.list_recategorized(settings.history_load_limit)
        corrections = [
            Correction(merchant_name=row.merchant.name, category=row.user_category, amount=row.amount)
            for row in rows
            if row.merchant is not None
        ]
        patterns = self.history.load(corrections)
        self._history_loaded = True
        logger.info(
            "Loaded categorization history",
            extra={"corrections": len(corrections), "patterns": patterns},
        )
        return patterns

    async def _ensure_history(self) -> None:
        if not self._history_loaded:
            await self.load_history()

    async def categorize(self, tx: TransactionSnapshot) -> CategoryResult:
        """Classify a transaction, loading the correction history on first use.

        Args:
            tx: Transaction to categorize; the payment instrument is ignored

        Returns:
            Category, confidence in [0, 1] and the review flag
        """
        await self._ensure_history()
        return self.classifier.classify(tx)

    async def suggest(self, tx: TransactionSnapshot, limit: int | None = None) -> list[CategorySuggestion]:
        """Ranked categories for the user to choose from, best first.

        Args:
            tx: Transaction to categorize
            limit: Maximum suggestions (defaults to `suggestion_limit`)
        """
        await self._ensure_history()
        return self.classifier.suggestions(tx, limit or settings.suggestion_limit)

    async def record_correction(self, transaction_id: UUID, category: str) -> Transaction:
        """Apply a user's category to a transaction and learn from it.

        Raises:
            InvalidCategoryError: Category is not part of the taxonomy
            TransactionNotFoundError: No such (non-deleted) transaction
        """
        if not is_valid_category(category):
            raise InvalidCategoryError({"category": category})

        transaction = await self.transaction_repo.get_by_id(transaction_id)
        if transaction is None:
            raise TransactionNotFoundError({"transaction_id": str(transaction_id)})

        await self._ensure_history()
        transaction.user_category = category
        transaction.is_recategorized = True
        transaction.needs_review = False
        await self.db.commit()
        await self.db.refresh(transaction)

        merchant_name = transaction.merchant.name if transaction.merchant is not None else None
        self.classifier.record_user_correction(merchant_name, transaction.amount, category)

        logger.info(
            "Recorded category correction",
            extra={"transaction_id": str(transaction_id), "category": category},
        )
        return transaction

    async def recategorize_all(self, dry_run: bool = False) -> RecategorizationSummary:
        """Re-run the classifier over every stored transaction.

        Transactions the user recategorized keep their category. With
        `dry_run` nothing is written.

        Args:
            dry_run: Count what would change without committing

        Returns:
            Processed, changed, skipped and needs-review counts
        """
        await self._ensure_history()
        summary = RecategorizationSummary(dry_run=dry_run)
        page_size = settings.recompute_page_size
        offset = 0

        while True:
            rows = await self.transaction_repo.list_page(offset, page_size)
            if not rows:
                break
            for row in rows:
                summary.processed += 1
                if row.is_recategorized:
                    summary.skipped_user_categorized += 1
                    continue

                result = self.classifier.classify(row.to_snapshot())
                if result.needs_review:
                    summary.needs_review += 1
                if result.category != row.category or result.confidence != row.auto_category_confidence:
                    summary.updated += 1
                    if not dry_run:
                        for key, value in category_fields(result).items():
                            setattr(row, key, value)
            if not dry_run:
                await self.db.commit()
            offset += page_size

        logger.info(
            "Recategorized transactions",
            extra={
                "processed": summary.processed,
                "updated": summary.updated,
                "skipped": summary.skipped_user_categorized,
                "dry_run": dry_run,
            },
        )
        return summary
