"""Statement-scoped aggregates for rule evaluation.

The Transaction Store is an external collaborator; `TransactionRepository`
implements it over the database and `InMemoryTransactionStore` in process.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Protocol
from uuid import UUID, uuid4

from cardrewards.rewards.period import utc_date
from cardrewards.schemas.rewards import PaymentInstrument, StatementContext, StatementPeriod
from cardrewards.schemas.transaction import TransactionSnapshot


class TransactionStore(Protocol):
    async def list_in_period(
        self,
        instrument_id: UUID,
        start: date,
        end: date,
        include_deleted: bool = False,
    ) -> list[TransactionSnapshot]: ...

    async def get(self, transaction_id: UUID) -> TransactionSnapshot | None: ...

    async def upsert(self, tx: TransactionSnapshot) -> TransactionSnapshot: ...

    async def soft_delete(self, transaction_id: UUID) -> None: ...


class InMemoryTransactionStore:
    def __init__(self, transactions: list[TransactionSnapshot] | None = None):
        self._transactions: dict[UUID, TransactionSnapshot] = {}
        self._deleted: set[UUID] = set()
        for tx in transactions or []:
            self._put(tx)

    def _put(self, tx: TransactionSnapshot) -> TransactionSnapshot:
        if tx.id is None:
            tx = tx.model_copy(update={"id": uuid4()})
        self._transactions[tx.id] = tx
        return tx

    async def list_in_period(
        self,
        instrument_id: UUID,
        start: date,
        end: date,
        include_deleted: bool = False,
    ) -> list[TransactionSnapshot]:
        found = [
            tx
            for tx in self._transactions.values()
            if tx.instrument_id == instrument_id
            and tx.occurred_at is not None
            and start <= utc_date(tx.occurred_at) <= end
            and (include_deleted or tx.id not in self._deleted)
        ]
        return sorted(found, key=lambda tx: (tx.occurred_at, str(tx.id)))

    async def get(self, transaction_id: UUID) -> TransactionSnapshot | None:
        if transaction_id in self._deleted:
            return None
        return self._transactions.get(transaction_id)

    async def upsert(self, tx: TransactionSnapshot) -> TransactionSnapshot:
        return self._put(tx)

    async def soft_delete(self, transaction_id: UUID) -> None:
        if transaction_id in self._transactions:
            self._deleted.add(transaction_id)


def summarize_statement(
    instrument: PaymentInstrument,
    period: StatementPeriod,
    transactions: list[TransactionSnapshot],
    current: TransactionSnapshot,
) -> StatementContext:
    """Aggregate the statement up to (not including) the current transaction.

    Counted: transactions no later than the current one, other than the
    current one itself. Amounts are the ones points are computed from.
    `spend_to_date` only sums amounts in the instrument's currency;
    `spend_by_currency` keys every amount by its transaction currency.
    """
    home_currency = instrument.currency.upper()
    spend = Decimal("0")
    by_currency: dict[str, Decimal] = defaultdict(Decimal)
    count = 0
    for tx in transactions:
        if current.id is not None and tx.id == current.id:
            continue
        if current.occurred_at is not None and tx.occurred_at is not None and tx.occurred_at > current.occurred_at:
            continue
        amount = tx.points_amount
        if amount is None:
            continue
        if tx.points_currency == home_currency:
            spend += amount
        by_currency[tx.currency] += amount
        count += 1

    return StatementContext(
        instrument=instrument,
        period=period,
        spend_to_date=spend,
        spend_by_currency=dict(by_currency),
        transaction_count=count,
    )
