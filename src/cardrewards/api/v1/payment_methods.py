"""Payment method endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends

from cardrewards.api.deps import get_reward_service
from cardrewards.schemas.rewards import RecomputeSummary
from cardrewards.services.rewards import RewardService

router = APIRouter(prefix="/payment-methods", tags=["payment-methods"])


@router.post(
    "/{payment_method_id}/recompute",
    response_model=RecomputeSummary,
    summary="Rebuild reward points for a payment method",
    description="""
    Reverse every bonus points movement of the payment method's transactions
    and recalculate them oldest first, so monthly caps are consumed in
    chronological order. Use after changing reward rules or to reconcile a
    ledger write that failed.
    """,
)
async def recompute_payment_method(
    payment_method_id: UUID,
    service: RewardService = Depends(get_reward_service),
) -> RecomputeSummary:
    return await service.recompute_instrument(payment_method_id)
