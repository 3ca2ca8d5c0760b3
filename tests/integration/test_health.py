"""Integration tests for health endpoints."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from cardrewards.db.session import get_db


def override_db(session):
    async def _get_db():
        yield session

    return _get_db


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"


@pytest.mark.asyncio
async def test_ready_when_database_answers(app, client: AsyncClient, mock_db):
    app.dependency_overrides[get_db] = override_db(mock_db)

    response = await client.get("/health/ready")

    assert response.status_code == 200
    assert response.json()["database"] == "connected"


@pytest.mark.asyncio
async def test_not_ready_when_database_down(app, client: AsyncClient):
    session = AsyncMock()
    session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
    app.dependency_overrides[get_db] = override_db(session)

    response = await client.get("/health/ready")

    assert response.status_code == 503
    assert response.json() == {"status": "not ready", "database": "disconnected", "error": "OperationalError"}
