"""Learning from the user's own category corrections.

When a user keeps recategorizing the same merchant the same way, that
history outranks the generic MCC and name signals.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from cardrewards.categorization.merchants import normalize_merchant
from cardrewards.config import settings

logger = logging.getLogger(__name__)

TYPICAL_LOW = Decimal("0.7")
TYPICAL_HIGH = Decimal("1.3")


@dataclass
class HistoricalPattern:
    category: str
    count: int
    consistency: float
    avg_amount: Decimal
    min_amount: Decimal
    max_amount: Decimal

    def is_typical(self, amount: Decimal) -> bool:
        return self.min_amount * TYPICAL_LOW <= amount <= self.max_amount * TYPICAL_HIGH


@dataclass(frozen=True)
class Correction:
    """One transaction the user recategorized by hand."""

    merchant_name: str
    category: str
    amount: Decimal


class HistoricalPatternStore:
    """Per-merchant category patterns keyed by normalized merchant name."""

    def __init__(
        self,
        min_samples: int | None = None,
        min_consistency: float | None = None,
    ):
        self.min_samples = min_samples if min_samples is not None else settings.history_min_samples
        self.min_consistency = (
            min_consistency if min_consistency is not None else settings.history_min_consistency
        )
        self._patterns: dict[str, HistoricalPattern] = {}

    def __len__(self) -> int:
        return len(self._patterns)

    def get(self, merchant_name: str) -> HistoricalPattern | None:
        return self._patterns.get(normalize_merchant(merchant_name))

    def load(self, corrections: Iterable[Correction]) -> int:
        """Rebuild patterns from past corrections.

        Merchants with fewer than `min_samples` corrections are skipped. The
        most frequent category wins; consistency is its share of the samples.

        Returns:
            Number of patterns loaded
        """
        grouped: dict[str, tuple[Counter, list[Decimal]]] = {}
        for correction in corrections:
            key = normalize_merchant(correction.merchant_name)
            if not key or not correction.category:
                continue
            categories, amounts = grouped.setdefault(key, (Counter(), []))
            categories[correction.category] += 1
            amounts.append(abs(Decimal(correction.amount)))

        self._patterns.clear()
        for key, (categories, amounts) in grouped.items():
            total = sum(categories.values())
            if total < self.min_samples:
                continue
            top_category, top_count = categories.most_common(1)[0]
            self._patterns[key] = HistoricalPattern(
                category=top_category,
                count=total,
                consistency=top_count / total,
                avg_amount=sum(amounts, Decimal("0")) / len(amounts),
                min_amount=min(amounts),
                max_amount=max(amounts),
            )

        logger.info("Loaded historical category patterns", extra={"patterns": len(self._patterns)})
        return len(self._patterns)

    def lookup(self, merchant_name: str | None, amount: Decimal | None) -> tuple[str, float] | None:
        """Return (category, confidence) when history is strong enough, else None."""
        if not merchant_name:
            return None
        pattern = self.get(merchant_name)
        if pattern is None or pattern.count < self.min_samples:
            return None
        if pattern.consistency < self.min_consistency:
            return None

        if amount is not None and pattern.is_typical(abs(amount)):
            confidence = min(1.0, pattern.consistency * 1.2)
        else:
            confidence = pattern.consistency * 0.8
        return pattern.category, confidence

    def record_correction(self, merchant_name: str, amount: Decimal, category: str) -> None:
        """Fold a new user correction into the merchant's pattern.

        A matching category reinforces the pattern; a conflicting one erodes
        consistency and replaces the pattern once consistency drops below 0.5.
        """
        key = normalize_merchant(merchant_name)
        if not key:
            return
        amount = abs(Decimal(amount))
        pattern = self._patterns.get(key)

        if pattern is None:
            self._patterns[key] = HistoricalPattern(
                category=category,
                count=1,
                consistency=0.7,
                avg_amount=amount,
                min_amount=amount,
                max_amount=amount,
            )
            return

        new_count = pattern.count + 1
        if pattern.category == category:
            pattern.avg_amount = (pattern.avg_amount * pattern.count + amount) / new_count
            pattern.count = new_count
            pattern.consistency = min(1.0, pattern.consistency + 0.1 / new_count)
            pattern.min_amount = min(pattern.min_amount, amount)
            pattern.max_amount = max(pattern.max_amount, amount)
            return

        new_consistency = pattern.consistency - 0.1 / new_count
        if new_consistency < 0.5:
            self._patterns[key] = HistoricalPattern(
                category=category,
                count=1,
                consistency=0.7,
                avg_amount=amount,
                min_amount=amount,
                max_amount=amount,
            )
        else:
            pattern.consistency = new_consistency

    def clear(self) -> None:
        self._patterns.clear()
