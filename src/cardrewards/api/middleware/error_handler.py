"""Exception handlers turning errors into the catalog's JSON error body.

Every error response has the same shape: error_code, message,
user_message, suggestion and retry_allowed.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from cardrewards.config import settings
from cardrewards.core.errors import ERROR_CATALOG
from cardrewards.core.exceptions import RewardEngineError

logger = logging.getLogger(__name__)


def error_body(error_code: str, message: str | None = None) -> dict:
    error_info = ERROR_CATALOG.get(error_code, {})
    return {
        "error_code": error_code,
        "message": message or error_info.get("message", "An error occurred"),
        "user_message": error_info.get("user_message", "An error occurred"),
        "suggestion": error_info.get("suggestion", "Please try again later"),
        "retry_allowed": error_info.get("retry_allowed", False),
    }


async def handle_reward_engine_error(request: Request, exc: RewardEngineError) -> JSONResponse:
    """Handle errors raised by stores and services.

    Args:
        request: The incoming request
        exc: The service exception

    Returns:
        JSONResponse with error details from catalog
    """
    # details may carry merchant names or amounts
    extra = {"error_code": exc.error_code, "path": request.url.path, "method": request.method}
    if settings.debug:
        extra["details"] = exc.details

    log = logger.error if exc.http_status >= 500 else logger.warning
    log(f"Request failed: {exc.error_code}", extra=extra)

    return JSONResponse(status_code=exc.http_status, content=error_body(exc.error_code))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle Pydantic validation errors as VAL_001."""
    error_messages = []
    for error in exc.errors():
        field = ".".join(str(x) for x in error.get("loc", []))
        msg = error.get("msg", "Invalid value")
        error_messages.append(f"{field}: {msg}")

    extra = {"path": request.url.path, "method": request.method}
    if settings.debug:
        extra["errors"] = exc.errors()
    logger.warning(f"Validation error on {request.url.path}", extra=extra)

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("VAL_001", " | ".join(error_messages)),
    )


async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    """Handle database integrity errors.

    Duplicate keys become 409 DB_002, anything else 500 DB_001.
    """
    # str(exc) includes SQL and bound parameters
    log = logger.exception if settings.debug else logger.error
    log(
        f"Database integrity error on {request.url.path}",
        extra={"path": request.url.path, "method": request.method},
    )

    error_msg = str(exc).lower()
    if "unique" in error_msg or "duplicate" in error_msg:
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=error_body("DB_002"))

    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=error_body("DB_001"))


async def handle_generic_error(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions without exposing internals."""
    extra = {
        "error_type": type(exc).__name__,
        "path": request.url.path,
        "method": request.method,
    }
    if settings.debug:
        logger.exception(f"Unexpected error on {request.url.path}", extra=extra)
    else:
        logger.error(f"Unexpected error on {request.url.path}", extra=extra)

    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=error_body("SYS_001"))
