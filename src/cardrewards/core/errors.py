"""Error codes and user-friendly messages.

This module defines the error catalog for the rewards and categorization
service. Each error has:
- error_code: Unique identifier
- message: Technical description (for logs)
- user_message: User-friendly explanation
- suggestion: Actionable guidance for the user
- retry_allowed: Whether the error is retryable
"""

ERROR_CATALOG: dict[str, dict] = {
    "RULE_001": {
        "code": "RULE_001",
        "message": "Reward rule configuration is malformed and was ignored",
        "user_message": "One of this card's reward rules could not be read.",
        "suggestion": "Review the card's reward rules. Points were calculated without it.",
        "retry_allowed": False,
    },
    "LEDGER_001": {
        "code": "LEDGER_001",
        "message": "Bonus points ledger could not be read",
        "user_message": "We couldn't check how many bonus points you've already earned this period.",
        "suggestion": "Points shown are provisional and will be reconciled later.",
        "retry_allowed": True,
    },
    "LEDGER_002": {
        "code": "LEDGER_002",
        "message": "Bonus points ledger could not be written",
        "user_message": "Your transaction was saved, but bonus tracking is out of date.",
        "suggestion": "Run a recompute for this card to reconcile bonus points.",
        "retry_allowed": True,
    },
    "CALC_001": {
        "code": "CALC_001",
        "message": "Reward calculation failed; fallback points were used",
        "user_message": "We estimated the points for this transaction.",
        "suggestion": "Check the transaction amount and merchant details.",
        "retry_allowed": True,
    },
    "DB_001": {
        "code": "DB_001",
        "message": "Database operation failed",
        "user_message": "A database error occurred.",
        "suggestion": "Please try again in a few moments.",
        "retry_allowed": True,
    },
    "DB_002": {
        "code": "DB_002",
        "message": "Resource already exists",
        "user_message": "This record already exists.",
        "suggestion": "Please check if the record was already created.",
        "retry_allowed": False,
    },
    "VAL_001": {
        "code": "VAL_001",
        "message": "Request data failed validation",
        "user_message": "Invalid input data.",
        "suggestion": "Please check your input and try again.",
        "retry_allowed": True,
    },
    # API-specific errors
    "API_001": {
        "code": "API_001",
        "message": "Payment method not found",
        "user_message": "We couldn't find this payment method.",
        "suggestion": "Please check the payment method ID and try again.",
        "retry_allowed": False,
    },
    "API_002": {
        "code": "API_002",
        "message": "Transaction not found",
        "user_message": "We couldn't find this transaction.",
        "suggestion": "Please refresh and try again.",
        "retry_allowed": False,
    },
    "API_003": {
        "code": "API_003",
        "message": "Invalid category",
        "user_message": "That category isn't supported.",
        "suggestion": "Please choose a category from the allowed list.",
        "retry_allowed": False,
    },
    "SYS_001": {
        "code": "SYS_001",
        "message": "Internal server error",
        "user_message": "An unexpected error occurred.",
        "suggestion": "Please try again later or contact support.",
        "retry_allowed": True,
    },
}


def get_error(error_code: str) -> dict:
    """Get error definition by code.

    Args:
        error_code: Error code from the catalog

    Returns:
        Dict with error details. Unknown codes get a generic definition.
    """
    if error_code not in ERROR_CATALOG:
        return {
            "code": "UNKNOWN",
            "message": f"Unknown error code: {error_code}",
            "user_message": "An unexpected error occurred.",
            "suggestion": "Please try again. Contact support if the problem persists.",
            "retry_allowed": True,
        }
    return ERROR_CATALOG[error_code]


def get_user_message(error_code: str) -> str:
    """Get user-friendly message for an error code."""
    return get_error(error_code)["user_message"]


def get_suggestion(error_code: str) -> str:
    """Get actionable suggestion for an error code."""
    return get_error(error_code)["suggestion"]


def is_retryable(error_code: str) -> bool:
    """Check if an error is retryable."""
    return get_error(error_code)["retry_allowed"]
