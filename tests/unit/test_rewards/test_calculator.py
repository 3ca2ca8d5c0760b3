"""Unit tests for RewardCalculator."""

import asyncio
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from cardrewards.core.exceptions import LedgerUnavailableError, LedgerWriteError
from cardrewards.rewards import (
    BonusPointsLedger,
    InMemoryLedgerStore,
    InMemoryTransactionStore,
    KeyedLocks,
    RewardCalculator,
    StrategyRegistry,
)
from cardrewards.schemas.rewards import PaymentInstrument, PointsBreakdown, StatementPeriod
from tests.factories import make_tx


MARCH = StatementPeriod(start=date(2025, 3, 1), end=date(2025, 3, 31))


class SlowStore(InMemoryLedgerStore):
    async def sum(self, *args, **kwargs):
        # yield between read and write so unserialized callers would interleave
        value = await super().sum(*args, **kwargs)
        await asyncio.sleep(0)
        return value


class UnreadableStore(InMemoryLedgerStore):
    async def sum(self, *args, **kwargs):
        raise LedgerUnavailableError({"reason": "down"})


class ReadOnlyStore(InMemoryLedgerStore):
    async def append(self, entry):
        raise LedgerWriteError({"reason": "read only"})


class BrokenStrategy:
    name = "broken"

    def eligible(self, tx, ctx):
        return False

    def compute(self, tx, ctx, ledger):
        raise RuntimeError("boom")


@pytest.fixture
def calculator(ledger, transaction_store):
    return RewardCalculator(ledger, transaction_store)


def at(day: int, hour: int = 12) -> datetime:
    return datetime(2025, 3, day, hour, tzinfo=timezone.utc)


class TestCalculate:
    """Dispatch and ledger recording."""

    @pytest.mark.asyncio
    async def test_uob_contactless_records_bonus(self, calculator, ledger, uob_platinum):
        tx = make_tx(instrument_id=uob_platinum.id, is_contactless=True)

        result = await calculator.calculate(tx, uob_platinum)

        assert (result.base_points, result.bonus_points, result.total_points) == (8, 72, 80)
        assert result.remaining_monthly_bonus_points == 3928
        assert result.strategy == "UOB Preferred Visa Platinum"
        assert result.ledger_recorded
        period = calculator.period_for(uob_platinum, tx)
        assert await ledger.used_bonus_points(uob_platinum.id, period) == 72

    @pytest.mark.asyncio
    async def test_recalculating_same_transaction_is_idempotent(self, calculator, ledger, uob_platinum):
        tx = make_tx(instrument_id=uob_platinum.id, is_contactless=True)

        first = await calculator.calculate(tx, uob_platinum)
        second = await calculator.calculate(tx, uob_platinum)

        assert first.bonus_points == second.bonus_points == 72
        period = calculator.period_for(uob_platinum, tx)
        assert await ledger.used_bonus_points(uob_platinum.id, period) == 72

    @pytest.mark.asyncio
    async def test_cap_is_shared_across_transactions(self, calculator, uob_platinum):
        big = make_tx(instrument_id=uob_platinum.id, amount=Decimal("1100"), is_contactless=True)
        small = make_tx(instrument_id=uob_platinum.id, amount=Decimal("100"), is_contactless=True)

        first = await calculator.calculate(big, uob_platinum)
        second = await calculator.calculate(small, uob_platinum)

        assert first.bonus_points == 3960
        assert second.bonus_points == 40
        assert second.remaining_monthly_bonus_points == 0
        assert "Monthly bonus cap reached" in second.messages

    @pytest.mark.asyncio
    async def test_offset_timestamp_on_period_edge_respects_cap(self, calculator, ledger, uob_platinum):
        march = make_tx(instrument_id=uob_platinum.id, amount=Decimal("1110"), is_contactless=True)
        # April 1st 07:00 in Singapore is March 31st in UTC
        edge = make_tx(
            instrument_id=uob_platinum.id,
            amount=Decimal("100"),
            is_contactless=True,
            occurred_at=datetime(2025, 4, 1, 7, 0, tzinfo=timezone(timedelta(hours=8))),
        )

        await calculator.calculate(march, uob_platinum)
        result = await calculator.calculate(edge, uob_platinum)

        assert result.bonus_points == 4
        assert await ledger.used_bonus_points(uob_platinum.id, MARCH) == 4000

    @pytest.mark.asyncio
    async def test_concurrent_calculations_never_exceed_cap(self, uob_platinum):
        store = SlowStore()
        calculator = RewardCalculator(BonusPointsLedger(store, KeyedLocks()), InMemoryTransactionStore())
        transactions = [
            make_tx(instrument_id=uob_platinum.id, amount=Decimal("500"), is_contactless=True)
            for _ in range(10)
        ]

        results = await asyncio.gather(*(calculator.calculate(tx, uob_platinum) for tx in transactions))

        assert sum(r.bonus_points for r in results) == 4000
        assert await store.sum(uob_platinum.id, MARCH.start, MARCH.end) == 4000
        assert all(r.base_points == 200 for r in results)

    @pytest.mark.asyncio
    async def test_generic_rules_for_unknown_product(self, calculator, generic_card):
        result = await calculator.calculate(
            make_tx(instrument_id=generic_card.id, amount=Decimal("150")), generic_card
        )
        assert result.total_points == 450
        assert result.applied_rule == "Dining 3x"
        assert result.strategy == "generic"

    @pytest.mark.asyncio
    async def test_cash_earns_nothing(self, calculator, cash, ledger_store):
        result = await calculator.calculate(make_tx(instrument_id=cash.id), cash)
        assert result == PointsBreakdown.zero(strategy="cash")
        assert ledger_store.entries == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "-15.00"])
    async def test_non_positive_amount_earns_nothing(self, calculator, uob_platinum, amount):
        result = await calculator.calculate(
            make_tx(instrument_id=uob_platinum.id, amount=Decimal(amount), is_contactless=True),
            uob_platinum,
        )
        assert result.total_points == 0
        assert result.messages == ["No points for zero or negative amounts"]

    @pytest.mark.asyncio
    async def test_payment_amount_drives_points(self, calculator, uob_platinum):
        tx = make_tx(
            instrument_id=uob_platinum.id,
            amount=Decimal("100"),
            currency="USD",
            payment_amount=Decimal("135.40"),
            payment_currency="SGD",
            is_contactless=True,
        )
        result = await calculator.calculate(tx, uob_platinum)
        # 135 floored to 135: base 54, bonus 486
        assert (result.base_points, result.bonus_points) == (54, 486)


class TestDegradation:
    """Failures degrade instead of raising."""

    @pytest.mark.asyncio
    async def test_missing_amount_falls_back(self, calculator, uob_platinum):
        result = await calculator.calculate(make_tx(instrument_id=uob_platinum.id, amount=None), uob_platinum)
        assert result.fallback
        assert result.total_points == 0
        assert result.strategy == "fallback"

    @pytest.mark.asyncio
    async def test_strategy_error_falls_back_to_rounded_amount(self, ledger, caplog):
        registry = StrategyRegistry()
        registry.register("Bank", "Broken", BrokenStrategy())
        calculator = RewardCalculator(ledger, registry=registry)
        card = PaymentInstrument(id=uuid4(), issuer="Bank", product="Broken")

        result = await calculator.calculate(make_tx(amount=Decimal("23.50")), card)

        assert result.fallback
        assert (result.base_points, result.bonus_points, result.total_points) == (24, 0, 24)
        assert any(getattr(r, "error_code", None) == "CALC_001" for r in caplog.records)

    @pytest.mark.asyncio
    async def test_unreadable_ledger_gives_provisional_points(self, uob_platinum):
        calculator = RewardCalculator(BonusPointsLedger(UnreadableStore()))
        result = await calculator.calculate(make_tx(is_contactless=True), uob_platinum)
        assert result.provisional
        assert result.bonus_points == 72

    @pytest.mark.asyncio
    async def test_ledger_write_failure_keeps_points(self, uob_platinum, caplog):
        calculator = RewardCalculator(BonusPointsLedger(ReadOnlyStore()))
        result = await calculator.calculate(make_tx(is_contactless=True), uob_platinum)
        assert result.total_points == 80
        assert not result.ledger_recorded
        assert any(getattr(r, "error_code", None) == "LEDGER_002" for r in caplog.records)


class TestStatementContext:
    @pytest.mark.asyncio
    async def test_visa_signature_sees_earlier_foreign_spend(self, ledger):
        card = PaymentInstrument(id=uuid4(), issuer="UOB", product="Visa Signature")
        earlier = make_tx(instrument_id=card.id, amount=Decimal("900"), currency="USD", occurred_at=at(2))
        store = InMemoryTransactionStore([earlier])
        calculator = RewardCalculator(ledger, store)

        result = await calculator.calculate(
            make_tx(instrument_id=card.id, amount=Decimal("100"), currency="USD", occurred_at=at(5)), card
        )

        assert result.bonus_points == 360
        assert "Minimum foreign spend reached" in result.messages

    @pytest.mark.asyncio
    async def test_later_transactions_do_not_count(self, ledger):
        card = PaymentInstrument(id=uuid4(), issuer="UOB", product="Visa Signature")
        later = make_tx(instrument_id=card.id, amount=Decimal("900"), currency="USD", occurred_at=at(20))
        calculator = RewardCalculator(ledger, InMemoryTransactionStore([later]))

        result = await calculator.calculate(
            make_tx(instrument_id=card.id, amount=Decimal("100"), currency="USD", occurred_at=at(5)), card
        )

        assert result.bonus_points == 0


class TestSimulate:
    @pytest.mark.asyncio
    async def test_simulation_never_writes(self, calculator, ledger_store, uob_platinum):
        result = await calculator.simulate(
            uob_platinum, Decimal("23.00"), is_contactless=True, as_of=at(10)
        )
        assert result.total_points == 80
        assert not result.ledger_recorded
        assert ledger_store.entries == []

    @pytest.mark.asyncio
    async def test_simulation_sees_consumed_cap(self, calculator, uob_platinum):
        await calculator.calculate(
            make_tx(instrument_id=uob_platinum.id, amount=Decimal("1110"), is_contactless=True),
            uob_platinum,
        )
        result = await calculator.simulate(uob_platinum, Decimal("23"), is_contactless=True, as_of=at(11))
        assert result.bonus_points == 4000 - 3996


class TestReverseAndRecompute:
    @pytest.mark.asyncio
    async def test_reverse_releases_bonus(self, calculator, ledger, uob_platinum):
        tx = make_tx(instrument_id=uob_platinum.id, is_contactless=True)
        await calculator.calculate(tx, uob_platinum)

        released = await calculator.reverse(tx, uob_platinum)

        assert released == 72
        period = calculator.period_for(uob_platinum, tx)
        assert await ledger.used_bonus_points(uob_platinum.id, period) == 0

    @pytest.mark.asyncio
    async def test_reverse_cash_is_noop(self, calculator, cash):
        assert await calculator.reverse(make_tx(), cash) == 0

    @pytest.mark.asyncio
    async def test_recompute_prices_oldest_first(self, calculator, ledger, uob_platinum):
        early = make_tx(instrument_id=uob_platinum.id, amount=Decimal("1000"), is_contactless=True, occurred_at=at(3))
        late = make_tx(instrument_id=uob_platinum.id, amount=Decimal("1000"), is_contactless=True, occurred_at=at(9))
        # Priced out of order first, so the late one took the bigger share
        await calculator.calculate(late, uob_platinum)
        await calculator.calculate(early, uob_platinum)

        results = await calculator.recompute(uob_platinum, [late, early])

        assert results[early.id].bonus_points == 3600
        assert results[late.id].bonus_points == 400
        period = calculator.period_for(uob_platinum, early)
        assert await ledger.used_bonus_points(uob_platinum.id, period) == 4000
