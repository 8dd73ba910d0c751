# tests/conftest.py

"""Pytest configuration and fixtures."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from meeplescore.db.models import Base
from meeplescore.db.session import get_db, get_session_factory
from meeplescore.main import app
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
AsyncTestingSessionLocal = async_sessionmaker(
    bind=engine, expire_on_commit=False, autocommit=False, autoflush=False
)


@pytest.fixture(scope="session", autouse=True)
async def setup_database():
    """Fixture to create and tear down the test database."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Fixture to provide a transactional database session to a test.
    The transaction is rolled back after the test, ensuring isolation.
    """
    connection = await engine.connect()
    transaction = await connection.begin()
    session = AsyncTestingSessionLocal(bind=connection)

    yield session

    await session.close()
    if transaction.is_active:
        await transaction.rollback()
    await connection.close()


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Fixture to provide an async test client for the API.

    Background stats recalculation shares the test session, so its writes
    are visible to the test and rolled back with everything else.
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    @asynccontextmanager
    async def shared_session():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: shared_session

    transport = ASGITransport(app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ===============================================
# Factory helpers
# ===============================================


@pytest.fixture
def create_player(async_client: AsyncClient):
    """Creates a player through the API and returns its JSON."""

    async def _create(name: str, **fields) -> dict:
        response = await async_client.post("/players/", json={"name": name, **fields})
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def create_game(async_client: AsyncClient):
    """Creates a game through the API and returns its JSON."""

    async def _create(name: str, **fields) -> dict:
        response = await async_client.post("/games/", json={"name": name, **fields})
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def record_session(async_client: AsyncClient):
    """Records a session from (player_id, rank) pairs and returns its JSON."""

    async def _record(game_id: int, placements: list[tuple[int, int]], **fields):
        payload = {
            "game_id": game_id,
            "results": [{"player_id": pid, "rank": rank} for pid, rank in placements],
            **fields,
        }
        response = await async_client.post("/sessions/", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _record
