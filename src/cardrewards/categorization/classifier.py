"""Multi-factor transaction categorization.

The classifier runs a fixed pipeline, each stage free to override the
previous stage's category and/or confidence:

1. MCC lookup (base category and confidence)
2. Multi-category merchant detection
3. Merchant-name keyword override
4. Amount heuristics
5. Time-of-day / day-of-week heuristics
6. The user's own correction history

It is pure and local: no I/O, no exceptions for bad input. Uncertainty is
reported through `confidence` and `needs_review`.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable
from uuid import uuid4

from cardrewards.categorization.categories import UNCATEGORIZED
from cardrewards.categorization.heuristics import apply_amount_heuristics, apply_time_heuristics
from cardrewards.categorization.history import HistoricalPatternStore
from cardrewards.categorization.mcc import category_result_from_mcc, normalize_mcc
from cardrewards.categorization.merchants import (
    category_from_merchant_name,
    get_multi_category_merchant,
)
from cardrewards.config import settings
from cardrewards.schemas.categorization import (
    BatchCategorizationResult,
    CategoryResult,
    CategorySuggestion,
)
from cardrewards.schemas.transaction import TransactionSnapshot

logger = logging.getLogger(__name__)

MULTI_CATEGORY_CONFIDENCE_CEILING = 0.6
MERCHANT_NAME_CONFIDENCE_FLOOR = 0.8
ALTERNATIVE_WEIGHT = 0.7
MCC_ALTERNATIVE_WEIGHT = 0.6


def _clamp(confidence: float) -> float:
    return max(0.0, min(1.0, confidence))


class CategoryClassifier:
    """Assigns a spending category with a confidence score."""

    def __init__(
        self,
        history: HistoricalPatternStore | None = None,
        review_threshold: float | None = None,
        multi_category_review_threshold: float | None = None,
    ):
        self.history = history
        self.review_threshold = (
            review_threshold if review_threshold is not None else settings.review_confidence_threshold
        )
        self.multi_category_review_threshold = (
            multi_category_review_threshold
            if multi_category_review_threshold is not None
            else settings.multi_category_review_threshold
        )

    def classify(self, tx: TransactionSnapshot) -> CategoryResult:
        """Categorize a transaction.

        Args:
            tx: Transaction snapshot (the payment instrument is ignored)

        Returns:
            CategoryResult with confidence in [0, 1] and the review flag
        """
        merchant_name = tx.merchant_name or ""

        # 1. MCC
        seed = category_result_from_mcc(tx.mcc)
        category = seed.category
        confidence = _clamp(seed.confidence)
        reason = seed.reason
        is_multi = seed.is_multi_category
        suggested: list[str] | None = None

        # 2. Multi-category merchant
        multi_merchant = get_multi_category_merchant(merchant_name)
        if multi_merchant is not None:
            category = multi_merchant.default_category
            confidence = min(confidence, MULTI_CATEGORY_CONFIDENCE_CEILING)
            is_multi = True
            suggested = list(multi_merchant.suggested_categories)
            reason = f"Multi-category merchant: {multi_merchant.name}"

        # 3. Merchant name
        name_category = category_from_merchant_name(merchant_name)
        if name_category and name_category != category:
            category = name_category
            confidence = _clamp(max(confidence, MERCHANT_NAME_CONFIDENCE_FLOOR))
            reason = f"Merchant name: {merchant_name}"
            is_multi = multi_merchant is not None
            if not is_multi:
                suggested = None

        # 4. Amount
        amount_result = apply_amount_heuristics(tx.amount, category, merchant_name, normalize_mcc(tx.mcc))
        if amount_result.category != category:
            category = amount_result.category
            confidence = _clamp(confidence * amount_result.confidence_multiplier)
            reason = amount_result.reason or reason
        elif amount_result.confidence_multiplier != 1.0:
            confidence = _clamp(confidence * amount_result.confidence_multiplier)

        # 5. Time
        time_result = apply_time_heuristics(tx.occurred_at, category, merchant_name)
        confidence = _clamp(confidence * time_result.confidence_multiplier)

        # 6. History
        if self.history is not None:
            learned = self.history.lookup(merchant_name, tx.amount)
            if learned is not None and learned[1] > confidence:
                category, confidence = learned[0], _clamp(learned[1])
                reason = f'You usually categorize "{merchant_name}" as {category}'

        needs_review = confidence < self.review_threshold or (
            is_multi and confidence < self.multi_category_review_threshold
        )

        return CategoryResult(
            category=category,
            confidence=confidence,
            reason=reason,
            needs_review=needs_review,
            is_multi_category=is_multi,
            suggested_categories=suggested,
        )

    def record_user_correction(self, merchant_name: str | None, amount: Decimal | None, category: str) -> bool:
        """Learn from a category the user picked. False when there is nothing to learn from."""
        if self.history is None or not merchant_name or amount is None:
            return False
        self.history.record_correction(merchant_name, amount, category)
        return True

    def suggestions(self, tx: TransactionSnapshot, limit: int | None = None) -> list[CategorySuggestion]:
        """Ranked alternatives for the user to pick from.

        The primary result comes first, then multi-category alternatives, then
        the plain MCC category when it differs.
        """
        limit = limit if limit is not None else settings.suggestion_limit
        result = self.classify(tx)
        suggestions = [
            CategorySuggestion(
                category=result.category,
                confidence=result.confidence,
                reason=result.reason,
            )
        ]

        for category in result.suggested_categories or []:
            if len(suggestions) >= limit:
                break
            if category != result.category:
                suggestions.append(
                    CategorySuggestion(
                        category=category,
                        confidence=_clamp(result.confidence * ALTERNATIVE_WEIGHT),
                        reason="Alternative for multi-category merchant",
                    )
                )

        mcc_result = category_result_from_mcc(tx.mcc)
        seen = {s.category for s in suggestions}
        if mcc_result.category not in seen and len(suggestions) < limit:
            suggestions.append(
                CategorySuggestion(
                    category=mcc_result.category,
                    confidence=_clamp(mcc_result.confidence * MCC_ALTERNATIVE_WEIGHT),
                    reason=f"Merchant type: {mcc_result.reason}",
                )
            )

        return suggestions[:limit]

    def classify_batch(self, transactions: Iterable[TransactionSnapshot]) -> BatchCategorizationResult:
        batch = BatchCategorizationResult()
        for tx in transactions:
            key = str(tx.id) if tx.id else str(uuid4())
            result = self.classify(tx)
            batch.results[key] = result

            if result.confidence >= self.multi_category_review_threshold:
                batch.high_confidence += 1
            elif result.confidence >= self.review_threshold:
                batch.medium_confidence += 1
            else:
                batch.low_confidence += 1
            if result.is_multi_category:
                batch.multi_category += 1
            if result.needs_review:
                batch.needs_review += 1

        logger.info(
            "Categorized batch",
            extra={
                "transactions": len(batch.results),
                "needs_review": batch.needs_review,
                "low_confidence": batch.low_confidence,
            },
        )
        return batch


def effective_category(tx: TransactionSnapshot) -> str:
    """Category to use for budgets and spending analysis.

    Prefers the user's choice, then the stored category, then the MCC, then
    the merchant name.
    """
    if tx.user_category:
        return tx.user_category
    if tx.category and tx.category != UNCATEGORIZED:
        return tx.category
    if normalize_mcc(tx.mcc):
        return category_result_from_mcc(tx.mcc).category
    name_category = category_from_merchant_name(tx.merchant_name)
    if name_category:
        return name_category
    return UNCATEGORIZED
