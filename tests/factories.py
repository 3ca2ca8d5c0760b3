"""Builders for test data."""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

from cardrewards.models.merchant import Merchant
from cardrewards.models.transaction import Transaction
from cardrewards.schemas.rewards import PaymentInstrument, StatementContext, StatementPeriod
from cardrewards.schemas.transaction import TransactionSnapshot


def make_tx(**overrides) -> TransactionSnapshot:
    data = {
        "id": uuid4(),
        "merchant_name": "Test Merchant",
        "mcc": "5812",
        "amount": Decimal("23.00"),
        "currency": "SGD",
        "occurred_at": datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return TransactionSnapshot(**data)


def make_context(
    instrument: PaymentInstrument | None = None,
    spend: str = "0",
    spend_by_currency: dict | None = None,
) -> StatementContext:
    return StatementContext(
        instrument=instrument or PaymentInstrument(name="card"),
        period=StatementPeriod(start=date(2025, 3, 1), end=date(2025, 3, 31)),
        spend_to_date=Decimal(spend),
        spend_by_currency={k: Decimal(v) for k, v in (spend_by_currency or {}).items()},
    )


def make_row(**overrides) -> Transaction:
    """Transaction ORM row, not attached to a session."""
    data = {
        "id": uuid4(),
        "payment_method_id": uuid4(),
        "occurred_at": datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc),
        "amount": Decimal("23.00"),
        "currency": "SGD",
        "is_online": False,
        "is_contactless": True,
        "is_recategorized": False,
        "needs_review": False,
        "base_points": 0,
        "bonus_points": 0,
        "total_points": 0,
        "points_provisional": False,
        "merchant": Merchant(name="Toast Box", mcc_code="5812", is_online=False),
    }
    data.update(overrides)
    return Transaction(**data)
