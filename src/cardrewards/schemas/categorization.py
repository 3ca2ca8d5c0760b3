"""Categorization result schemas."""

from uuid import UUID

from pydantic import BaseModel, Field

from cardrewards.schemas.transaction import TransactionSnapshot


class CategoryResult(BaseModel):
    """Category assigned to a transaction together with how sure we are."""

    category: str
    confidence: float = Field(ge=0.0, le=1.0)
    reason: str = ""
    needs_review: bool = True
    is_multi_category: bool = False
    suggested_categories: list[str] | None = None


class CategorySuggestion(BaseModel):
    category: str
    confidence: float = Field(ge=0.0, le=1.0)
    reason: str


class BatchCategorizationResult(BaseModel):
    """Results of categorizing many transactions plus confidence-band counts."""

    results: dict[str, CategoryResult] = Field(default_factory=dict)
    high_confidence: int = Field(0, description=">= 0.85")
    medium_confidence: int = Field(0, description="0.75 - 0.85")
    low_confidence: int = Field(0, description="< 0.75")
    multi_category: int = 0
    needs_review: int = 0


class CategorizeRequest(TransactionSnapshot):
    """API request body: a transaction snapshot to categorize."""

    pass


class SuggestionsResponse(BaseModel):
    transaction_id: UUID | None = None
    suggestions: list[CategorySuggestion]


class RecategorizationSummary(BaseModel):
    """Outcome of re-running the classifier over stored transactions."""

    processed: int = 0
    updated: int = 0
    skipped_user_categorized: int = 0
    needs_review: int = 0
    dry_run: bool = False
