"""Payment method model: a card or cash, with its reward configuration."""
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cardrewards.models.base import BaseModel
from cardrewards.schemas.rewards import PaymentInstrument


class PaymentMethod(BaseModel):
    """Payment method model.

    `reward_rules` holds the declarative rules as JSON in the same shape as
    `RewardRule`. Rules that no longer validate are dropped when the
    instrument is built.
    """

    __tablename__ = "payment_methods"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    kind: Mapped[str] = mapped_column(String(20), default="card", nullable=False)
    issuer: Mapped[str | None] = mapped_column(String(100), nullable=True)
    product: Mapped[str | None] = mapped_column(String(100), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="SGD", nullable=False)
    base_rate: Mapped[Decimal] = mapped_column(Numeric(10, 4), default=Decimal("1"), nullable=False)
    reward_rules: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    statement_day: Mapped[int | None] = mapped_column(Integer, nullable=True)
    use_statement_month: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    selected_categories: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    points_currency: Mapped[str] = mapped_column(String(50), default="points", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    transactions: Mapped[list["Transaction"]] = relationship("Transaction", back_populates="payment_method")

    def to_instrument(self) -> PaymentInstrument:
        return PaymentInstrument(
            id=self.id,
            name=self.name,
            kind=self.kind,
            issuer=self.issuer or "",
            product=self.product or "",
            currency=self.currency,
            base_rate=self.base_rate if self.base_rate is not None else Decimal("1"),
            reward_rules=self.reward_rules or [],
            statement_day=self.statement_day,
            use_statement_month=self.use_statement_month,
            selected_categories=self.selected_categories or [],
            points_currency=self.points_currency,
        )

    def __repr__(self) -> str:
        return f"<PaymentMethod(id={self.id}, issuer={self.issuer}, product={self.product})>"
