"""Reward service: the reward calculator over stored transactions."""
import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from cardrewards.categorization import is_valid_category
from cardrewards.config import settings
from cardrewards.core.exceptions import (
    InvalidCategoryError,
    PaymentMethodNotFoundError,
    TransactionNotFoundError,
    ValidationError,
)
from cardrewards.models.transaction import Transaction
from cardrewards.repositories.ledger import BonusPointsMovementRepository
from cardrewards.repositories.payment_method import PaymentMethodRepository
from cardrewards.repositories.transaction import TransactionRepository
from cardrewards.rewards import BonusPointsLedger, KeyedLocks, RewardCalculator, StrategyRegistry
from cardrewards.schemas.rewards import (
    PaymentInstrument,
    PointsBreakdown,
    RecomputeSummary,
    SimulationRequest,
)
from cardrewards.schemas.transaction import TransactionSnapshot
from cardrewards.services.categorization import CategorizationService, category_fields

logger = logging.getLogger(__name__)


def points_fields(breakdown: PointsBreakdown) -> dict:
    """Transaction columns set from a points breakdown."""
    return {
        "base_points": breakdown.base_points,
        "bonus_points": breakdown.bonus_points,
        "total_points": breakdown.total_points,
        "points_provisional": breakdown.provisional,
    }


class RewardService:
    """Service layer for reward points.

    The ledger locks are owned by the application so that every request
    shares them; the service only borrows them.
    """

    def __init__(
        self,
        db: AsyncSession,
        locks: KeyedLocks,
        registry: StrategyRegistry | None = None,
        categorization: CategorizationService | None = None,
    ):
        self.db = db
        self.transaction_repo = TransactionRepository(db)
        self.payment_method_repo = PaymentMethodRepository(db)
        self.ledger = BonusPointsLedger(BonusPointsMovementRepository(db), locks)
        self.calculator = RewardCalculator(self.ledger, self.transaction_repo, registry)
        self.categorization = categorization or CategorizationService(db)

    async def get_instrument(self, instrument_id: UUID) -> PaymentInstrument:
        """Load an instrument or fail.

        Raises:
            PaymentMethodNotFoundError: No such payment method
        """
        instrument = await self.payment_method_repo.get_instrument(instrument_id)
        if instrument is None:
            raise PaymentMethodNotFoundError({"payment_method_id": str(instrument_id)})
        return instrument

    async def simulate(self, request: SimulationRequest) -> PointsBreakdown:
        """Price a hypothetical transaction. The ledger is read, never written.

        Args:
            request: Instrument, amount and the transaction signals to price

        Returns:
            Points the transaction would earn given the cap consumed so far

        Raises:
            PaymentMethodNotFoundError: Unknown payment method
        """
        instrument = await self.get_instrument(request.instrument_id)
        return await self.calculator.simulate(
            instrument,
            amount=request.amount,
            currency=request.currency,
            mcc=request.mcc,
            merchant_name=request.merchant_name,
            is_online=request.is_online,
            is_contactless=request.is_contactless,
            as_of=request.as_of,
        )

    async def calculate_for_transaction(self, transaction_id: UUID) -> PointsBreakdown:
        """Recalculate a stored transaction's points and store them.

        The transaction's earlier ledger movement is replaced, so calling this
        again does not consume more of the cap.

        Returns:
            The new points breakdown

        Raises:
            TransactionNotFoundError: No such (non-deleted) transaction
            PaymentMethodNotFoundError: Its payment method is gone
        """
        snapshot = await self.transaction_repo.get(transaction_id)
        if snapshot is None:
            raise TransactionNotFoundError({"transaction_id": str(transaction_id)})
        instrument = await self.get_instrument(snapshot.instrument_id)

        breakdown = await self.calculator.calculate(snapshot, instrument)
        await self.transaction_repo.update(transaction_id, points_fields(breakdown))
        return breakdown

    async def save_transaction(self, tx: TransactionSnapshot) -> tuple[Transaction, PointsBreakdown]:
        """Store a transaction with its category and reward points.

        A category given by the user is kept as is; otherwise the classifier
        picks one. Points never block the save: the calculator degrades
        instead of raising.

        Args:
            tx: Transaction to store; `id` is None for a new one

        Returns:
            The stored row and its points breakdown

        Raises:
            PaymentMethodNotFoundError: Unknown payment method
            InvalidCategoryError: User category outside the taxonomy
            ValidationError: Payment method, amount or timestamp missing
        """
        missing = [field for field in ("instrument_id", "amount", "occurred_at") if getattr(tx, field) is None]
        if missing:
            raise ValidationError({"missing": missing})
        instrument = await self.get_instrument(tx.instrument_id)

        if tx.user_category:
            if not is_valid_category(tx.user_category):
                raise InvalidCategoryError({"category": tx.user_category})
            fields = {
                "auto_category_confidence": None,
                "needs_review": False,
                "category_suggestion_reason": None,
            }
            tx = tx.model_copy(update={"is_recategorized": True})
        else:
            result = await self.categorization.categorize(tx)
            fields = category_fields(result)
            tx = tx.model_copy(update={"category": result.category})

        saved = await self.transaction_repo.upsert(tx)
        breakdown = await self.calculator.calculate(saved, instrument)
        transaction = await self.transaction_repo.update(saved.id, {**fields, **points_fields(breakdown)})

        logger.info(
            "Transaction saved",
            extra={
                "transaction_id": str(saved.id),
                "instrument_id": str(instrument.id),
                "category": transaction.category if transaction else None,
                "total_points": breakdown.total_points,
                "ledger_recorded": breakdown.ledger_recorded,
            },
        )
        return transaction, breakdown

    async def delete_transaction(self, transaction_id: UUID) -> None:
        """Give the transaction's bonus points back to its period and soft delete it.

        Raises:
            TransactionNotFoundError: No such (non-deleted) transaction
        """
        snapshot = await self.transaction_repo.get(transaction_id)
        if snapshot is None:
            raise TransactionNotFoundError({"transaction_id": str(transaction_id)})

        instrument = await self.payment_method_repo.get_instrument(snapshot.instrument_id)
        if instrument is not None:
            await self.calculator.reverse(snapshot, instrument)
        await self.transaction_repo.soft_delete(transaction_id)
        logger.info("Transaction deleted", extra={"transaction_id": str(transaction_id)})

    async def recompute_instrument(self, instrument_id: UUID) -> RecomputeSummary:
        """Rebuild points and ledger movements for all of an instrument's transactions.

        Rows are committed every `recompute_page_size` transactions.

        Returns:
            Totals over the recomputed transactions

        Raises:
            PaymentMethodNotFoundError: Unknown payment method
        """
        instrument = await self.get_instrument(instrument_id)
        rows = await self.transaction_repo.list_for_instrument(instrument_id)
        results = await self.calculator.recompute(instrument, [row.to_snapshot() for row in rows])

        summary = RecomputeSummary(instrument_id=instrument_id)
        page_size = settings.recompute_page_size
        for index, row in enumerate(rows, start=1):
            breakdown = results.get(row.id)
            if breakdown is None:
                continue
            for key, value in points_fields(breakdown).items():
                setattr(row, key, value)
            summary.transactions += 1
            summary.base_points += breakdown.base_points
            summary.bonus_points += breakdown.bonus_points
            summary.total_points += breakdown.total_points
            summary.provisional += int(breakdown.provisional)
            if index % page_size == 0:
                await self.db.commit()
        await self.db.commit()

        logger.info(
            "Recomputed instrument",
            extra={
                "instrument_id": str(instrument_id),
                "transactions": summary.transactions,
                "bonus_points": summary.bonus_points,
            },
        )
        return summary
