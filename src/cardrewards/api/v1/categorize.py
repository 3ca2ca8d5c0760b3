"""Categorization endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from cardrewards.api.deps import get_categorization_service
from cardrewards.schemas.categorization import CategorizeRequest, CategoryResult, SuggestionsResponse
from cardrewards.services.categorization import CategorizationService

router = APIRouter(prefix="/categorize", tags=["categorization"])


@router.post(
    "",
    response_model=CategoryResult,
    summary="Categorize a transaction",
    description="""
    Assign a spending category with a confidence score.

    Signals, strongest last: MCC, multi-category merchants, merchant name,
    amount and time-of-day patterns, then the user's own past corrections.
    `needs_review` is set when confidence is below 0.75 (0.85 for
    multi-category merchants).
    """,
)
async def categorize_transaction(
    request: CategorizeRequest,
    service: CategorizationService = Depends(get_categorization_service),
) -> CategoryResult:
    return await service.categorize(request)


@router.post(
    "/suggestions",
    response_model=SuggestionsResponse,
    summary="Alternative categories for a transaction",
)
async def suggest_categories(
    request: CategorizeRequest,
    limit: Annotated[int | None, Query(ge=1, le=10, description="Maximum suggestions")] = None,
    service: CategorizationService = Depends(get_categorization_service),
) -> SuggestionsResponse:
    suggestions = await service.suggest(request, limit)
    return SuggestionsResponse(transaction_id=request.id, suggestions=suggestions)
