"""Append-only bonus points movements."""
from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from cardrewards.models.base import BaseModel
from cardrewards.schemas.rewards import LedgerEntry


class BonusPointsMovement(BaseModel):
    """One signed change to the bonus points consumed by a transaction.

    Rows are never updated or deleted; reversals are negative rows carrying
    the original `occurred_at`.
    """

    __tablename__ = "bonus_points_movements"

    transaction_id: Mapped[UUID] = mapped_column(ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False, index=True)
    payment_method_id: Mapped[UUID] = mapped_column(ForeignKey("payment_methods.id", ondelete="CASCADE"), nullable=False)
    bonus_points: Mapped[int] = mapped_column(Integer, nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_bonus_points_movements_payment_method_id_occurred_at", "payment_method_id", "occurred_at"),
    )

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "BonusPointsMovement":
        return cls(
            transaction_id=entry.transaction_id,
            payment_method_id=entry.instrument_id,
            bonus_points=entry.bonus_points,
            occurred_at=entry.occurred_at,
        )

    def to_entry(self) -> LedgerEntry:
        return LedgerEntry(
            transaction_id=self.transaction_id,
            instrument_id=self.payment_method_id,
            bonus_points=self.bonus_points,
            occurred_at=self.occurred_at,
            created_at=self.created_at,
        )

    def __repr__(self) -> str:
        return f"<BonusPointsMovement(transaction_id={self.transaction_id}, points={self.bonus_points})>"
