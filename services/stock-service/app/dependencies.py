"""
Shared dependencies for the application.

Provides dependency injection functions used across routers. The Redis
client and settings live on ``app.state`` (set by the lifespan); the
database session is scoped to the request.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .config import Settings
from .core.redis_manager import RedisConnectionManager
from .database import get_db
from .repositories.redis_repository import RedisStockCache
from .repositories.sql_repository import SqlStockRepository
from .services.stock_service import StockService


def get_settings(request: Request) -> Settings:
    """Get the settings the application was started with."""
    return request.app.state.settings


def get_redis_manager(request: Request) -> RedisConnectionManager:
    """Get the Redis connection manager created at startup."""
    return request.app.state.redis_manager


async def get_stock_service(
    db: AsyncSession = Depends(get_db),
    redis_manager: RedisConnectionManager = Depends(get_redis_manager),
    settings: Settings = Depends(get_settings),
) -> StockService:
    """
    Build the stock service for the current request.

    Used by all routers that need the stock service.
    """
    return StockService(
        repository=SqlStockRepository(db),
        cache=RedisStockCache(redis_manager.get_client(), ttl_seconds=settings.CACHE_TTL_SECONDS),
        simulated_store_latency_ms=settings.SIMULATED_STORE_LATENCY_MS,
    )
