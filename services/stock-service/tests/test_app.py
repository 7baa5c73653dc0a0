"""
Tests for application wiring.

Covers:
- Lifespan: database init, seeding, Redis acquisition and release
- Full request flow through router, service, SQLite store and Redis cache
- Health, readiness and metrics endpoints
- Per-request session cleanup
"""

import json
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from app.app import create_app
from app.config import Settings
from app.database import Database, get_db
from app.domain.exceptions import StoreUnavailableException


@pytest.fixture
def test_settings():
    """Settings pointing at an in-memory database."""
    return Settings(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        REDIS_URL="redis://localhost:6379/15",
        CACHE_TTL_SECONDS=60,
        SEED_ON_STARTUP=True,
    )


@pytest.fixture
def client(test_settings, mock_redis_manager):
    """Test client with the lifespan running against the fake Redis."""
    app = create_app(test_settings)

    with patch("app.app.RedisConnectionManager", return_value=mock_redis_manager):
        with TestClient(app) as test_client:
            yield test_client


class TestLifespan:
    def test_startup_and_shutdown(self, client, mock_redis_manager):
        mock_redis_manager.initialize.assert_awaited_once()
        mock_redis_manager.close.assert_not_called()

    def test_redis_closed_on_shutdown(self, test_settings, mock_redis_manager):
        app = create_app(test_settings)

        with patch("app.app.RedisConnectionManager", return_value=mock_redis_manager):
            with TestClient(app):
                pass

        mock_redis_manager.close.assert_awaited_once()

    def test_startup_fails_without_redis(self, test_settings, mock_redis_manager):
        mock_redis_manager.initialize.side_effect = ConnectionError("Connection refused")
        app = create_app(test_settings)

        with patch("app.app.RedisConnectionManager", return_value=mock_redis_manager):
            with pytest.raises(ConnectionError):
                with TestClient(app):
                    pass

        mock_redis_manager.close.assert_awaited_once()

    def test_startup_fails_when_seeding_fails(self, test_settings, mock_redis_manager):
        app = create_app(test_settings)

        with patch("app.app.RedisConnectionManager", return_value=mock_redis_manager), patch(
            "app.app.seed_stocks",
            AsyncMock(side_effect=StoreUnavailableException("insert", "database is locked")),
        ), patch.object(Database, "close", new_callable=AsyncMock) as database_close:
            with pytest.raises(StoreUnavailableException):
                with TestClient(app):
                    pass

        mock_redis_manager.close.assert_awaited_once()
        database_close.assert_awaited_once()

    def test_seed_data_available(self, client):
        assert client.get("/stocks/AAPL").json()["price"] == 150.0
        assert client.get("/stocks/MSFT").json()["price"] == 300.0


class TestStockFlow:
    def test_read_populates_cache(self, client, redis_data, mock_redis):
        response = client.get("/stocks/AAPL")

        assert response.status_code == 200
        assert response.json()["ticker"] == "AAPL"
        assert Decimal(json.loads(redis_data["stock:AAPL"])["price"]) == Decimal("150")
        assert mock_redis.set.call_args.kwargs["ex"] == 60

    def test_second_read_served_from_cache(self, client, mock_redis):
        client.get("/stocks/AAPL")
        client.get("/stocks/AAPL")

        assert mock_redis.get.call_count == 2
        assert mock_redis.set.call_count == 1

    def test_update_then_read(self, client, redis_data):
        client.get("/stocks/AAPL")

        update = client.post("/stocks/AAPL", json={"price": 160.0})
        assert update.status_code == 200
        assert update.json()["price"] == 160.0
        assert Decimal(json.loads(redis_data["stock:AAPL"])["price"]) == Decimal("160")

        read = client.get("/stocks/AAPL")
        assert read.json()["price"] == 160.0

    def test_unknown_ticker(self, client, redis_data):
        assert client.get("/stocks/ZZZZ").status_code == 404
        assert client.post("/stocks/ZZZZ", json={"price": 1}).status_code == 404
        assert "stock:ZZZZ" not in redis_data

    def test_corrupt_cache_entry(self, client, redis_data):
        redis_data["stock:AAPL"] = b"{not json"

        response = client.get("/stocks/AAPL")

        assert response.status_code == 503
        assert response.json()["error"] == "cache_unavailable"


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["service"] == "stock-service"

    def test_ready(self, client):
        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["ready"] is True
        assert response.json()["checks"] == {"database": "healthy", "redis": "healthy"}

    def test_not_ready_when_redis_down(self, client, mock_redis_manager):
        mock_redis_manager.health_check = AsyncMock(return_value=False)

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["checks"]["redis"] == "unhealthy"

    def test_metrics(self, client):
        client.get("/stocks/AAPL")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "stock_cache_misses_total" in response.text
        assert "stock_http_requests_total" in response.text


class TestDatabaseDependency:
    @pytest.mark.asyncio
    async def test_session_closed_when_request_fails(self):
        session_context = MagicMock()
        session_context.__aenter__.return_value = MagicMock()
        database = MagicMock()
        database.session_factory.return_value = session_context
        request = MagicMock()
        request.app.state.database = database

        dependency = get_db(request)
        session = await dependency.__anext__()
        assert session is session_context.__aenter__.return_value

        with pytest.raises(RuntimeError):
            await dependency.athrow(RuntimeError("handler failed"))

        session_context.__aexit__.assert_awaited_once()
