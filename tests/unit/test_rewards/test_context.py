from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from cardrewards.rewards import InMemoryTransactionStore, summarize_statement
from cardrewards.schemas.rewards import PaymentInstrument, SpendThresholdCondition, StatementPeriod
from tests.factories import make_tx

MARCH = StatementPeriod(start=date(2025, 3, 1), end=date(2025, 3, 31))
CARD = PaymentInstrument(id=uuid4(), name="card")


def at(day: int) -> datetime:
    return datetime(2025, 3, day, 9, tzinfo=timezone.utc)


def test_spend_counts_only_earlier_transactions():
    current = make_tx(amount=Decimal("10"), occurred_at=at(10))
    history = [
        make_tx(amount=Decimal("100"), occurred_at=at(1)),
        make_tx(amount=Decimal("50"), currency="USD", occurred_at=at(10)),
        make_tx(amount=Decimal("999"), occurred_at=at(11)),
        current,
    ]

    ctx = summarize_statement(CARD, MARCH, history, current)

    assert ctx.spend_to_date == Decimal("100")
    assert ctx.spend_by_currency == {"SGD": Decimal("100"), "USD": Decimal("50")}
    assert ctx.transaction_count == 2
    assert ctx.has_currency("sgd")
    assert ctx.spend_excluding_currency("SGD") == Decimal("50")


def test_settled_amount_is_counted_under_transaction_currency():
    current = make_tx(occurred_at=at(20))
    foreign = make_tx(
        amount=Decimal("100"),
        currency="USD",
        payment_amount=Decimal("134"),
        payment_currency="SGD",
        occurred_at=at(5),
    )

    ctx = summarize_statement(CARD, MARCH, [foreign], current)

    assert ctx.spend_by_currency == {"USD": Decimal("134")}


def test_spend_to_date_counts_only_instrument_currency():
    current = make_tx(occurred_at=at(20))
    statement = [
        make_tx(amount=Decimal("40"), occurred_at=at(2)),
        make_tx(amount=Decimal("100"), currency="USD", occurred_at=at(3)),
        make_tx(
            amount=Decimal("100"),
            currency="USD",
            payment_amount=Decimal("134"),
            payment_currency="SGD",
            occurred_at=at(4),
        ),
    ]

    ctx = summarize_statement(CARD, MARCH, statement, current)

    assert ctx.spend_to_date == Decimal("174")
    assert ctx.spend_by_currency == {"SGD": Decimal("40"), "USD": Decimal("234")}
    assert ctx.transaction_count == 3

    usd_card = PaymentInstrument(id=uuid4(), name="usd card", currency="usd")
    assert summarize_statement(usd_card, MARCH, statement, current).spend_to_date == Decimal("100")


def test_foreign_spend_does_not_meet_home_spend_threshold():
    current = make_tx(occurred_at=at(20))
    ctx = summarize_statement(CARD, MARCH, [make_tx(amount=Decimal("100"), currency="USD", occurred_at=at(1))], current)

    assert not SpendThresholdCondition(min_spend=Decimal("100")).evaluate(current, ctx)


def test_transactions_without_amount_are_skipped():
    ctx = summarize_statement(CARD, MARCH, [make_tx(amount=None, occurred_at=at(1))], make_tx(occurred_at=at(2)))
    assert ctx.spend_to_date == 0
    assert ctx.transaction_count == 0


class TestInMemoryTransactionStore:
    @pytest.mark.asyncio
    async def test_lists_period_in_order_without_deleted(self):
        first = make_tx(instrument_id=CARD.id, occurred_at=at(3))
        second = make_tx(instrument_id=CARD.id, occurred_at=at(7))
        deleted = make_tx(instrument_id=CARD.id, occurred_at=at(5))
        april = make_tx(instrument_id=CARD.id, occurred_at=datetime(2025, 4, 1, tzinfo=timezone.utc))
        store = InMemoryTransactionStore([second, deleted, first, april])
        await store.soft_delete(deleted.id)

        listed = await store.list_in_period(CARD.id, MARCH.start, MARCH.end)

        assert [tx.id for tx in listed] == [first.id, second.id]
        assert len(await store.list_in_period(CARD.id, MARCH.start, MARCH.end, include_deleted=True)) == 3
        assert await store.get(deleted.id) is None

    @pytest.mark.asyncio
    async def test_upsert_assigns_id(self):
        store = InMemoryTransactionStore()
        stored = await store.upsert(make_tx(id=None))
        assert stored.id is not None
        assert await store.get(stored.id) == stored
