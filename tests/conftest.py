import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, Mock
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

sys.path.append(str(Path(__file__).parents[1] / "src"))

from cardrewards.rewards import BonusPointsLedger, InMemoryLedgerStore, InMemoryTransactionStore, KeyedLocks
from cardrewards.schemas.rewards import PaymentInstrument


@pytest.fixture
def uob_platinum() -> PaymentInstrument:
    return PaymentInstrument(
        id=uuid4(),
        name="UOB PPV",
        issuer="UOB",
        product="Preferred Visa Platinum",
    )


@pytest.fixture
def generic_card() -> PaymentInstrument:
    return PaymentInstrument(
        id=uuid4(),
        name="Dining Card",
        issuer="Example Bank",
        product="Dining Rewards",
        reward_rules=[
            {
                "name": "Dining 3x",
                "condition": {"type": "mcc", "codes": ["5812"]},
                "multiplier": 3,
            }
        ],
    )


@pytest.fixture
def cash() -> PaymentInstrument:
    return PaymentInstrument(id=uuid4(), name="Cash", kind="cash")


@pytest.fixture
def ledger_store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def locks() -> KeyedLocks:
    return KeyedLocks()


@pytest.fixture
def ledger(ledger_store, locks) -> BonusPointsLedger:
    return BonusPointsLedger(ledger_store, locks)


@pytest.fixture
def transaction_store() -> InMemoryTransactionStore:
    return InMemoryTransactionStore()


@pytest.fixture
def mock_db():
    """Mock AsyncSession. Result.scalars().all() is synchronous; mimic that shape."""
    db = AsyncMock(spec=AsyncSession)
    db.add = Mock()
    execute_result = MagicMock()
    scalars_result = MagicMock()
    scalars_result.all.return_value = []
    scalars_result.first.return_value = None
    execute_result.scalars.return_value = scalars_result
    execute_result.scalar_one_or_none.return_value = None
    execute_result.scalar_one.return_value = 0
    db.execute = AsyncMock(return_value=execute_result)
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    return db


@pytest.fixture
def app():
    from cardrewards.main import create_app

    application = create_app()
    application.state.ledger_locks = KeyedLocks()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
