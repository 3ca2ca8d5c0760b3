"""Transaction repository.

Implements the transaction store the reward engine reads statement
aggregates from. Methods named after the store (`list_in_period`, `get`,
`upsert`, `soft_delete`) speak `TransactionSnapshot`; the rest return ORM
rows for services that update them.
"""
from datetime import date, datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cardrewards.models.transaction import Transaction
from cardrewards.repositories.base import BaseRepository, day_start
from cardrewards.repositories.merchant import MerchantRepository
from cardrewards.schemas.transaction import TransactionSnapshot


class TransactionRepository(BaseRepository[Transaction]):
    """Repository for Transaction model and the reward engine's transaction store."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Transaction)
        self.merchants = MerchantRepository(db)

    async def list_in_period(
        self,
        instrument_id: UUID,
        start: date,
        end: date,
        include_deleted: bool = False,
    ) -> list[TransactionSnapshot]:
        """Transactions of an instrument with occurred_at on [start, end], oldest first."""
        query = select(Transaction).where(
            Transaction.payment_method_id == instrument_id,
            Transaction.occurred_at >= day_start(start),
            Transaction.occurred_at < day_start(end + timedelta(days=1)),
        )
        if not include_deleted:
            query = query.where(Transaction.deleted_at.is_(None))
        result = await self.db.execute(query.order_by(Transaction.occurred_at, Transaction.id))
        return [row.to_snapshot() for row in result.scalars().all()]

    async def get(self, transaction_id: UUID) -> TransactionSnapshot | None:
        """Snapshot of a non-deleted transaction, or None."""
        transaction = await self.get_by_id(transaction_id)
        return transaction.to_snapshot() if transaction else None

    async def upsert(self, tx: TransactionSnapshot) -> TransactionSnapshot:
        """Insert or update a transaction from a snapshot.

        The merchant is looked up by name and MCC and created when missing.
        A snapshot without `occurred_at` is stamped with the current time.

        Args:
            tx: Transaction to store; a new row is created when `tx.id` is
                None or unknown

        Returns:
            The stored transaction, with its id
        """
        transaction = await self.get_by_id(tx.id) if tx.id is not None else None
        if transaction is None:
            transaction = Transaction(payment_method_id=tx.instrument_id)
            if tx.id is not None:
                transaction.id = tx.id
            self.db.add(transaction)

        if tx.merchant_name:
            transaction.merchant = await self.merchants.get_or_create(tx.merchant_name, tx.mcc, tx.is_online)
        else:
            transaction.merchant = None

        transaction.payment_method_id = tx.instrument_id
        transaction.occurred_at = tx.occurred_at or datetime.now(timezone.utc)
        transaction.amount = tx.amount
        transaction.currency = tx.currency
        transaction.payment_amount = tx.payment_amount
        transaction.payment_currency = tx.payment_currency
        transaction.is_online = tx.is_online
        transaction.is_contactless = tx.is_contactless
        transaction.category = tx.category
        transaction.user_category = tx.user_category
        transaction.is_recategorized = tx.is_recategorized

        await self.db.commit()
        await self.db.refresh(transaction)
        return transaction.to_snapshot()

    async def list_for_instrument(self, instrument_id: UUID) -> list[Transaction]:
        """Non-deleted transactions of an instrument in chronological order."""
        result = await self.db.execute(
            select(Transaction)
            .where(Transaction.payment_method_id == instrument_id, Transaction.deleted_at.is_(None))
            .order_by(Transaction.occurred_at, Transaction.id)
        )
        return list(result.scalars().all())

    async def list_recategorized(self, limit: int = 500) -> list[Transaction]:
        """Transactions whose category the user corrected, most recent first."""
        result = await self.db.execute(
            select(Transaction)
            .where(
                Transaction.is_recategorized.is_(True),
                Transaction.user_category.is_not(None),
                Transaction.deleted_at.is_(None),
            )
            .order_by(Transaction.updated_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_page(self, offset: int = 0, limit: int = 500) -> list[Transaction]:
        """One page of non-deleted transactions, oldest first.

        Args:
            offset: Rows to skip
            limit: Page size

        Returns:
            Up to `limit` ORM rows; an empty list past the last page
        """
        result = await self.db.execute(
            select(Transaction)
            .where(Transaction.deleted_at.is_(None))
            .order_by(Transaction.occurred_at, Transaction.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())
