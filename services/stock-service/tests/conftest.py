"""
Test configuration and fixtures
"""

from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.pool import StaticPool

from app.database import Database
from app.domain.entities import StockRecord
from app.repositories.redis_repository import RedisStockCache
from app.repositories.sql_repository import SqlStockRepository

# In-memory SQLite shared by all sessions of one engine
SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def sample_record():
    """Sample stock record for testing"""
    return StockRecord(
        ticker="AAPL",
        price=Decimal("150.0"),
        updated_at=datetime(2024, 1, 1, 12, 0, 0),
    )


@pytest.fixture
def redis_data():
    """Backing dict of the fake Redis client"""
    return {}


@pytest.fixture
def mock_redis(redis_data):
    """
    Async Redis mock backed by a dict.

    Only get/set are emulated; TTLs are recorded but never expire.
    """
    client = AsyncMock()

    def _get(key):
        return redis_data.get(key)

    def _set(key, value, ex=None):
        redis_data[key] = value.encode("utf-8") if isinstance(value, str) else value
        return True

    client.get.side_effect = _get
    client.set.side_effect = _set
    client.ping.return_value = True
    return client


@pytest.fixture
def redis_cache(mock_redis):
    """Redis stock cache over the dict-backed mock"""
    return RedisStockCache(mock_redis, ttl_seconds=60)


@pytest_asyncio.fixture
async def database():
    """Fresh in-memory database with tables created"""
    db = Database(SQLALCHEMY_DATABASE_URL, poolclass=StaticPool)
    await db.init_db()
    try:
        yield db
    finally:
        await db.close()


@pytest_asyncio.fixture
async def db_session(database):
    """Async session on the in-memory database"""
    async with database.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def stock_repository(db_session):
    """SQL repository seeded with AAPL at 150.0"""
    repository = SqlStockRepository(db_session)
    await repository.add_all([("AAPL", Decimal("150.0"))])
    return repository


@pytest.fixture
def mock_redis_manager(mock_redis):
    """Redis connection manager stand-in handing out the dict-backed client"""
    manager = MagicMock()
    manager.initialize = AsyncMock()
    manager.close = AsyncMock()
    manager.health_check = AsyncMock(return_value=True)
    manager.get_client.return_value = mock_redis
    return manager
