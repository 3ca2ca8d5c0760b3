"""Merchant model."""
from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cardrewards.models.base import BaseModel


class Merchant(BaseModel):
    __tablename__ = "merchants"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    mcc_code: Mapped[str | None] = mapped_column(String(4), nullable=True)
    is_online: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    transactions: Mapped[list["Transaction"]] = relationship("Transaction", back_populates="merchant")

    def __repr__(self) -> str:
        return f"<Merchant(id={self.id}, name={self.name}, mcc={self.mcc_code})>"
