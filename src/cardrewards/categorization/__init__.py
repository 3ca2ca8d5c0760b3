"""Transaction categorization.

Deterministic, local categorization from MCC, merchant name, amount and time
signals, optionally sharpened by the user's own correction history.
"""

from .categories import CATEGORIES, UNCATEGORIZED, is_valid_category
from .classifier import CategoryClassifier, effective_category
from .history import Correction, HistoricalPatternStore

__all__ = [
    "CATEGORIES",
    "UNCATEGORIZED",
    "CategoryClassifier",
    "Correction",
    "HistoricalPatternStore",
    "effective_category",
    "is_valid_category",
]
