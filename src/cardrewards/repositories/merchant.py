"""Merchant repository."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cardrewards.models.merchant import Merchant
from cardrewards.repositories.base import BaseRepository


class MerchantRepository(BaseRepository[Merchant]):
    """Repository for Merchant model."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Merchant)

    async def get_or_create(self, name: str, mcc_code: str | None = None, is_online: bool = False) -> Merchant:
        """Find a merchant by name and MCC, adding it (unflushed) when missing."""
        result = await self.db.execute(
            select(Merchant).where(
                Merchant.name == name,
                Merchant.mcc_code.is_(None) if mcc_code is None else Merchant.mcc_code == mcc_code,
                Merchant.deleted_at.is_(None),
            )
        )
        merchant = result.scalars().first()
        if merchant is None:
            merchant = Merchant(name=name, mcc_code=mcc_code, is_online=is_online)
            self.db.add(merchant)
        return merchant
