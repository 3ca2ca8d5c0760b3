"""FastAPI dependencies for database sessions and services."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cardrewards.db.session import get_db
from cardrewards.rewards import KeyedLocks
from cardrewards.services.categorization import CategorizationService
from cardrewards.services.rewards import RewardService


def get_ledger_locks(request: Request) -> KeyedLocks:
    """Ledger locks created by the application lifespan.

    One set per process, shared by every request.
    """
    return request.app.state.ledger_locks


async def get_categorization_service(
    db: AsyncSession = Depends(get_db),
) -> CategorizationService:
    return CategorizationService(db)


async def get_reward_service(
    db: AsyncSession = Depends(get_db),
    locks: KeyedLocks = Depends(get_ledger_locks),
    categorization: CategorizationService = Depends(get_categorization_service),
) -> RewardService:
    return RewardService(db, locks, categorization=categorization)
