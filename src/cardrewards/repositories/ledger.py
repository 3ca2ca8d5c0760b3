"""Bonus points ledger store over the `bonus_points_movements` table."""
from datetime import date, timedelta
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardrewards.core.exceptions import LedgerUnavailableError, LedgerWriteError
from cardrewards.models.bonus_points_movement import BonusPointsMovement
from cardrewards.repositories.base import BaseRepository, day_start
from cardrewards.schemas.rewards import LedgerEntry


class BonusPointsMovementRepository(BaseRepository[BonusPointsMovement]):
    """Append-only store of bonus points movements.

    Database failures surface as ledger errors so the calculator can degrade
    (provisional result on read, unrecorded result on write).
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db, BonusPointsMovement)

    async def sum(
        self,
        instrument_id: UUID,
        start: date,
        end: date,
        exclude_transaction_id: UUID | None = None,
    ) -> int:
        """Net bonus points of an instrument with occurred_at on [start, end].

        Days are UTC: the window runs from midnight UTC on `start` to midnight
        UTC after `end`.

        Args:
            instrument_id: Payment method the movements belong to
            start: First day of the statement period
            end: Last day of the statement period
            exclude_transaction_id: Leave out this transaction's movements

        Returns:
            Sum of signed movements (0 when there are none)

        Raises:
            LedgerUnavailableError: The query failed
        """
        query = select(func.coalesce(func.sum(BonusPointsMovement.bonus_points), 0)).where(
            BonusPointsMovement.payment_method_id == instrument_id,
            BonusPointsMovement.occurred_at >= day_start(start),
            BonusPointsMovement.occurred_at < day_start(end + timedelta(days=1)),
        )
        if exclude_transaction_id is not None:
            query = query.where(BonusPointsMovement.transaction_id != exclude_transaction_id)
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as exc:
            raise LedgerUnavailableError(
                details={"instrument_id": str(instrument_id), "error": str(exc)}
            ) from exc
        return int(result.scalar_one() or 0)

    async def append(self, entry: LedgerEntry) -> None:
        """Insert one movement and commit.

        Raises:
            LedgerWriteError: The insert failed (the session is rolled back)
        """
        try:
            self.db.add(BonusPointsMovement.from_entry(entry))
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise LedgerWriteError(
                details={"transaction_id": str(entry.transaction_id), "error": str(exc)}
            ) from exc

    async def for_transaction(self, transaction_id: UUID) -> list[LedgerEntry]:
        """Every movement of a transaction, oldest first.

        Raises:
            LedgerUnavailableError: The query failed
        """
        try:
            result = await self.db.execute(
                select(BonusPointsMovement)
                .where(BonusPointsMovement.transaction_id == transaction_id)
                .order_by(BonusPointsMovement.created_at)
            )
        except SQLAlchemyError as exc:
            raise LedgerUnavailableError(
                details={"transaction_id": str(transaction_id), "error": str(exc)}
            ) from exc
        return [row.to_entry() for row in result.scalars().all()]
