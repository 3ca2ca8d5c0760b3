"""Transaction endpoints: save with points, delete, recategorize."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from cardrewards.api.deps import get_categorization_service, get_reward_service
from cardrewards.schemas.transaction import (
    CategoryCorrectionRequest,
    TransactionCreate,
    TransactionPointsResponse,
)
from cardrewards.services.categorization import CategorizationService
from cardrewards.services.rewards import RewardService

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post(
    "",
    response_model=TransactionPointsResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a transaction",
    description="""
    Store a transaction, categorize it (unless `user_category` is given) and
    calculate its reward points. Points are advisory: a failed calculation
    falls back to amount-based points instead of rejecting the transaction.
    """,
)
async def create_transaction(
    request: TransactionCreate,
    service: RewardService = Depends(get_reward_service),
) -> TransactionPointsResponse:
    transaction, breakdown = await service.save_transaction(request)
    response = TransactionPointsResponse.model_validate(transaction)
    return response.model_copy(
        update={
            "remaining_monthly_bonus_points": breakdown.remaining_monthly_bonus_points,
            "messages": breakdown.messages,
        }
    )


@router.delete(
    "/{transaction_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a transaction",
)
async def delete_transaction(
    transaction_id: UUID,
    service: RewardService = Depends(get_reward_service),
) -> Response:
    await service.delete_transaction(transaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{transaction_id}/category",
    response_model=TransactionPointsResponse,
    summary="Set the category of a transaction",
    description="The correction is remembered and used for future transactions at the same merchant.",
)
async def correct_category(
    transaction_id: UUID,
    request: CategoryCorrectionRequest,
    service: CategorizationService = Depends(get_categorization_service),
) -> TransactionPointsResponse:
    transaction = await service.record_correction(transaction_id, request.category)
    response = TransactionPointsResponse.model_validate(transaction)
    return response.model_copy(update={"category": transaction.user_category})
