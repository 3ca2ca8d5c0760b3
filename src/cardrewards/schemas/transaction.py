"""Transaction snapshots consumed by the categorization and reward engines.

Both engines operate on read-only snapshots, never on ORM rows, so they can be
driven from the database, from an API request or from a batch job alike.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TransactionSnapshot(BaseModel):
    """Immutable view of a purchase.

    `amount` is in the transaction currency. When the card settled the
    purchase in a different currency, `payment_amount`/`payment_currency`
    carry the settled figure and reward points are computed from it.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID | None = None
    instrument_id: UUID | None = None
    merchant_name: str | None = None
    mcc: str | None = Field(None, description="4-digit merchant category code")
    amount: Decimal | None = None
    currency: str = "SGD"
    payment_amount: Decimal | None = None
    payment_currency: str | None = None
    occurred_at: datetime | None = None
    is_online: bool = False
    is_contactless: bool = False
    category: str | None = None
    user_category: str | None = None
    is_recategorized: bool = False

    @field_validator("currency", "payment_currency")
    @classmethod
    def upper_currency(cls, v: str | None) -> str | None:
        return v.strip().upper() if v else v

    @field_validator("mcc")
    @classmethod
    def strip_mcc(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @property
    def uses_payment_amount(self) -> bool:
        return (
            self.payment_amount is not None
            and self.payment_currency is not None
            and self.payment_currency != self.currency
        )

    @property
    def points_amount(self) -> Decimal | None:
        """Amount reward points are computed from."""
        return self.payment_amount if self.uses_payment_amount else self.amount

    @property
    def points_currency(self) -> str:
        return self.payment_currency if self.uses_payment_amount else self.currency


class TransactionCreate(TransactionSnapshot):
    """API request body for recording a transaction."""

    instrument_id: UUID
    amount: Decimal


class CategoryCorrectionRequest(BaseModel):
    """Request to set a user category on a transaction."""

    category: str = Field(description="Category to apply (must be from supported taxonomy)")


class TransactionPointsResponse(BaseModel):
    """Transaction after categorization and reward calculation."""

    id: UUID
    category: str | None
    auto_category_confidence: float | None
    needs_review: bool
    base_points: int
    bonus_points: int
    total_points: int
    points_provisional: bool = False
    remaining_monthly_bonus_points: int | None = None
    messages: list[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
