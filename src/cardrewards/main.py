from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from cardrewards.api.middleware.error_handler import (
    handle_generic_error,
    handle_integrity_error,
    handle_reward_engine_error,
    handle_validation_error,
)
from cardrewards.api.middleware.logging import RequestLoggingMiddleware, configure_logging
from cardrewards.api.v1 import router as v1_router
from cardrewards.api.v1.health import router as health_router
from cardrewards.config import settings
from cardrewards.core.exceptions import RewardEngineError
from cardrewards.rewards import KeyedLocks


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level, settings.log_json)
    # Shared by every request so ledger read+write is serialized per (card, period)
    app.state.ledger_locks = KeyedLocks()
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Card Rewards API",
        description="Transaction categorization and credit card reward points",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)

    # Most specific first
    app.add_exception_handler(RewardEngineError, handle_reward_engine_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(Exception, handle_generic_error)

    app.include_router(health_router)
    app.include_router(v1_router)

    return app


app = create_app()
