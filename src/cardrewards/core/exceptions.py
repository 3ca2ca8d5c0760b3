"""Custom exception classes for the rewards service.

Each exception maps to an error code defined in errors.py. The engines
(classifier, calculator) catch these internally and degrade; they surface
only from stores, services and the HTTP layer.
"""

from typing import Any


class RewardEngineError(Exception):
    """Base exception for all rewards service errors.

    Attributes:
        error_code: Code from the error catalog (e.g., "LEDGER_001")
        details: Additional context about the error (for logging)
        http_status: HTTP status code to return (default: 500)
    """

    def __init__(
        self,
        error_code: str,
        details: dict[str, Any] | None = None,
        http_status: int = 500,
    ):
        """Initialize the exception.

        Args:
            error_code: Error code from errors.py
            details: Additional error context (not shown to users)
            http_status: HTTP status code (default: 500)
        """
        self.error_code = error_code
        self.details = details or {}
        self.http_status = http_status
        super().__init__(error_code)


class RuleConfigurationError(RewardEngineError):
    """Raised when a reward rule cannot be interpreted (RULE_001)."""

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("RULE_001", details=details, http_status=422)


class LedgerError(RewardEngineError):
    """Base class for bonus points ledger failures."""

    pass


class LedgerUnavailableError(LedgerError):
    """Raised when the ledger cannot be read (LEDGER_001)."""

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("LEDGER_001", details=details, http_status=503)


class LedgerWriteError(LedgerError):
    """Raised when a ledger movement cannot be appended (LEDGER_002)."""

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("LEDGER_002", details=details, http_status=503)


class PaymentMethodNotFoundError(RewardEngineError):
    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("API_001", details=details, http_status=404)


class TransactionNotFoundError(RewardEngineError):
    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("API_002", details=details, http_status=404)


class InvalidCategoryError(RewardEngineError):
    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("API_003", details=details, http_status=400)


class ValidationError(RewardEngineError):
    """Raised when request data fails business validation.

    This includes:
    - Missing required fields
    - Amounts that cannot be interpreted
    """

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("VAL_001", details=details, http_status=400)
