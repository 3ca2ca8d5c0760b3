"""Reward calculation orchestrator.

Dispatch: cash instruments earn nothing; instruments with a registered
issuer strategy use it; everything else goes through the generic rule
engine. Reading consumed bonus points, computing and recording the new
movement happen under the ledger lock of the (instrument, period), so
concurrent calculations cannot both spend the same remaining cap.

The result is advisory: anything that goes wrong while computing degrades
to the fallback (base = rounded amount, no bonus) instead of raising.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

from cardrewards.config import settings
from cardrewards.core.exceptions import LedgerError
from cardrewards.rewards.context import TransactionStore, summarize_statement
from cardrewards.rewards.ledger import BonusPointsLedger, LedgerState
from cardrewards.rewards.matcher import RuleMatcher
from cardrewards.rewards.period import StatementPeriodResolver
from cardrewards.rewards.rounding import round_half_up
from cardrewards.rewards.strategies import GenericRuleStrategy, RewardStrategy, StrategyRegistry, default_registry
from cardrewards.schemas.rewards import (
    PaymentInstrument,
    PointsBreakdown,
    StatementContext,
    StatementPeriod,
)
from cardrewards.schemas.transaction import TransactionSnapshot

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Points estimated from the amount, reward rules could not be applied"
NON_POSITIVE_MESSAGE = "No points for zero or negative amounts"


class RewardCalculator:
    def __init__(
        self,
        ledger: BonusPointsLedger,
        transactions: TransactionStore | None = None,
        registry: StrategyRegistry | None = None,
        period_resolver: StatementPeriodResolver | None = None,
        matcher: RuleMatcher | None = None,
    ):
        self.ledger = ledger
        self.transactions = transactions
        self.registry = registry if registry is not None else default_registry()
        self.period_resolver = period_resolver or StatementPeriodResolver()
        self.generic = GenericRuleStrategy(matcher or RuleMatcher())

    def strategy_for(self, instrument: PaymentInstrument) -> RewardStrategy:
        return self.registry.get(instrument.issuer, instrument.product) or self.generic

    def period_for(self, instrument: PaymentInstrument, tx: TransactionSnapshot) -> StatementPeriod:
        return self.period_resolver.resolve(instrument, self._as_of(tx))

    async def statement_context(
        self,
        instrument: PaymentInstrument,
        period: StatementPeriod,
        tx: TransactionSnapshot,
    ) -> StatementContext:
        transactions = []
        if self.transactions is not None and instrument.id is not None:
            transactions = await self.transactions.list_in_period(instrument.id, period.start, period.end)
        return summarize_statement(instrument, period, transactions, tx)

    async def calculate(
        self,
        tx: TransactionSnapshot,
        instrument: PaymentInstrument,
        record: bool = True,
    ) -> PointsBreakdown:
        """Points for a transaction.

        Args:
            tx: Transaction to price
            instrument: Instrument it was paid with
            record: Write the bonus points to the ledger (replacing any earlier
                movement of the same transaction). False for what-if pricing.
        """
        if instrument.is_cash:
            return PointsBreakdown.zero(strategy="cash")

        try:
            breakdown = await self._calculate(tx, instrument, record)
        except Exception as exc:
            logger.warning(
                "Reward calculation fell back to amount-based points",
                extra={
                    "error_code": "CALC_001",
                    "transaction_id": str(tx.id) if tx.id else None,
                    "instrument_id": str(instrument.id) if instrument.id else None,
                    "error": str(exc),
                },
                exc_info=True,
            )
            return self.fallback(tx)

        logger.debug(
            "Reward points calculated",
            extra={
                "transaction_id": str(tx.id) if tx.id else None,
                "instrument_id": str(instrument.id) if instrument.id else None,
                "strategy": breakdown.strategy,
                "base_points": breakdown.base_points,
                "bonus_points": breakdown.bonus_points,
                "provisional": breakdown.provisional,
            },
        )
        return breakdown

    async def simulate(
        self,
        instrument: PaymentInstrument,
        amount: Decimal,
        currency: str | None = None,
        mcc: str | None = None,
        merchant_name: str | None = None,
        is_online: bool = False,
        is_contactless: bool = False,
        as_of: datetime | None = None,
    ) -> PointsBreakdown:
        """What-if pricing of a transaction that is not stored. Never writes."""
        tx = TransactionSnapshot(
            instrument_id=instrument.id,
            merchant_name=merchant_name,
            mcc=mcc,
            amount=amount,
            currency=currency or settings.home_currency,
            occurred_at=as_of or datetime.now(timezone.utc),
            is_online=is_online,
            is_contactless=is_contactless,
        )
        return await self.calculate(tx, instrument, record=False)

    async def reverse(self, tx: TransactionSnapshot, instrument: PaymentInstrument) -> int:
        """Offset the ledger movements of a transaction being deleted.

        Returns:
            Bonus points given back to the period
        """
        if tx.id is None or instrument.is_cash or instrument.id is None:
            return 0
        async with self.ledger.lock(instrument.id, self.period_for(instrument, tx)):
            reversals = await self.ledger.reverse(tx.id)
        released = -sum(entry.bonus_points for entry in reversals)
        logger.info(
            "Bonus points reversed",
            extra={"transaction_id": str(tx.id), "instrument_id": str(instrument.id), "points": released},
        )
        return released

    async def recompute(
        self,
        instrument: PaymentInstrument,
        transactions: list[TransactionSnapshot],
    ) -> dict[UUID, PointsBreakdown]:
        """Rebuild the ledger for a set of transactions.

        Every prior movement is reversed first, then transactions are priced
        oldest first (ties by id) so each sees only the cap consumed before it.
        """
        ordered = sorted(
            (tx for tx in transactions if tx.id is not None),
            key=lambda tx: (self._as_of(tx), str(tx.id)),
        )
        for tx in ordered:
            await self.reverse(tx, instrument)

        results = {}
        for tx in ordered:
            results[tx.id] = await self.calculate(tx, instrument)

        logger.info(
            "Recomputed reward points",
            extra={
                "instrument_id": str(instrument.id) if instrument.id else None,
                "transactions": len(results),
                "bonus_points": sum(r.bonus_points for r in results.values()),
            },
        )
        return results

    def fallback(self, tx: TransactionSnapshot) -> PointsBreakdown:
        amount = tx.points_amount
        base_points = round_half_up(amount) if amount is not None else 0
        return PointsBreakdown(
            base_points=base_points,
            bonus_points=0,
            total_points=base_points,
            strategy="fallback",
            fallback=True,
            messages=[FALLBACK_MESSAGE],
        )

    async def _calculate(
        self,
        tx: TransactionSnapshot,
        instrument: PaymentInstrument,
        record: bool,
    ) -> PointsBreakdown:
        if tx.points_amount is None:
            raise ValueError("transaction has no amount")

        period = self.period_for(instrument, tx)
        ctx = await self.statement_context(instrument, period, tx)
        strategy = self.strategy_for(instrument)
        can_record = record and tx.id is not None and instrument.id is not None

        if not can_record:
            state = await self._ledger_state(instrument, period, tx)
            return self._compute(strategy, tx, ctx, state)

        async with self.ledger.lock(instrument.id, period):
            state = await self._ledger_state(instrument, period, tx)
            breakdown = self._compute(strategy, tx, ctx, state)
            recorded = await self._record(tx, instrument, breakdown)
        return breakdown.model_copy(update={"ledger_recorded": recorded})

    def _compute(
        self,
        strategy: RewardStrategy,
        tx: TransactionSnapshot,
        ctx: StatementContext,
        state: LedgerState,
    ) -> PointsBreakdown:
        if tx.points_amount <= 0:
            return PointsBreakdown.zero(
                strategy=strategy.name,
                provisional=state.provisional,
                messages=[NON_POSITIVE_MESSAGE],
            )
        return strategy.compute(tx, ctx, state)

    async def _ledger_state(
        self,
        instrument: PaymentInstrument,
        period: StatementPeriod,
        tx: TransactionSnapshot,
    ) -> LedgerState:
        if instrument.id is None:
            return LedgerState()
        return await self.ledger.state(instrument.id, period, tx.id)

    async def _record(self, tx: TransactionSnapshot, instrument: PaymentInstrument, breakdown: PointsBreakdown) -> bool:
        try:
            await self.ledger.replace(tx.id, instrument.id, breakdown.bonus_points, self._as_of(tx))
        except LedgerError as exc:
            logger.error(
                "Failed to record bonus points, keeping computed points",
                extra={
                    "error_code": exc.error_code,
                    "transaction_id": str(tx.id),
                    "instrument_id": str(instrument.id),
                    "bonus_points": breakdown.bonus_points,
                },
            )
            return False
        return True

    @staticmethod
    def _as_of(tx: TransactionSnapshot) -> datetime:
        return tx.occurred_at or datetime.now(timezone.utc)
