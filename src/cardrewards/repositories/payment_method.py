"""Payment method repository."""
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from cardrewards.models.payment_method import PaymentMethod
from cardrewards.repositories.base import BaseRepository
from cardrewards.schemas.rewards import PaymentInstrument


class PaymentMethodRepository(BaseRepository[PaymentMethod]):
    """Repository for PaymentMethod model."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, PaymentMethod)

    async def get_instrument(self, id: UUID) -> PaymentInstrument | None:
        """Load a payment method as the instrument the reward engine works with.

        Returns:
            The instrument with its valid reward rules, or None when the
            payment method does not exist or is deleted
        """
        payment_method = await self.get_by_id(id)
        if payment_method is None:
            return None
        return payment_method.to_instrument()
