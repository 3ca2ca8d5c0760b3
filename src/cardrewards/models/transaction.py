"""Transaction model with its category and reward points."""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cardrewards.models.base import BaseModel
from cardrewards.schemas.transaction import TransactionSnapshot


class Transaction(BaseModel):
    """A purchase paid with a payment method.

    `amount`/`currency` are what the merchant charged; `payment_amount` and
    `payment_currency` are set when the card was billed in another currency.
    """

    __tablename__ = "transactions"

    merchant_id: Mapped[UUID | None] = mapped_column(ForeignKey("merchants.id", ondelete="SET NULL"), nullable=True, index=True)
    payment_method_id: Mapped[UUID] = mapped_column(ForeignKey("payment_methods.id", ondelete="CASCADE"), nullable=False, index=True)
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="SGD", nullable=False)
    payment_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    payment_currency: Mapped[str | None] = mapped_column(String(3), nullable=True)
    is_online: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_contactless: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    category: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    user_category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_recategorized: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    auto_category_confidence: Mapped[float | None] = mapped_column(Float, nullable=True)
    needs_review: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    category_suggestion_reason: Mapped[str | None] = mapped_column(String(255), nullable=True)

    base_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    bonus_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    points_provisional: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index("ix_transactions_payment_method_id_occurred_at", "payment_method_id", "occurred_at"),
    )

    merchant: Mapped[Optional["Merchant"]] = relationship("Merchant", back_populates="transactions", lazy="joined")
    payment_method: Mapped["PaymentMethod"] = relationship("PaymentMethod", back_populates="transactions")

    def to_snapshot(self) -> TransactionSnapshot:
        merchant = self.merchant
        return TransactionSnapshot(
            id=self.id,
            instrument_id=self.payment_method_id,
            merchant_name=merchant.name if merchant else None,
            mcc=merchant.mcc_code if merchant else None,
            amount=self.amount,
            currency=self.currency,
            payment_amount=self.payment_amount,
            payment_currency=self.payment_currency,
            occurred_at=self.occurred_at,
            is_online=self.is_online,
            is_contactless=self.is_contactless,
            category=self.category,
            user_category=self.user_category,
            is_recategorized=self.is_recategorized,
        )

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, amount={self.amount}, currency={self.currency})>"
