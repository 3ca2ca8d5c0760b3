"""API version 1 routes."""

from fastapi import APIRouter

from cardrewards.api.v1 import categorize, payment_methods, rewards, transactions

router = APIRouter(prefix="/api/v1")

router.include_router(categorize.router)
router.include_router(rewards.router)
router.include_router(transactions.router)
router.include_router(payment_methods.router)
