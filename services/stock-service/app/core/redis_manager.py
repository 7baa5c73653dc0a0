"""
Redis connection management with pooling and health checks.

The manager is created by the application lifespan, initialized once at
startup and closed at shutdown. Nothing here is a module-level singleton.
"""

import logging
from typing import Optional
from urllib.parse import urlparse

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from ..config import Settings

logger = logging.getLogger(__name__)


class RedisConfig:
    """Redis connection parameters derived from settings."""

    def __init__(self, settings: Settings) -> None:
        parsed = urlparse(settings.REDIS_URL)
        self.host: str = parsed.hostname or "localhost"
        self.port: int = parsed.port or 6379
        self.password: Optional[str] = parsed.password
        self.username: Optional[str] = parsed.username
        self.db: int = int(parsed.path.lstrip("/") or "0")
        self.ssl: bool = parsed.scheme == "rediss"

        self.max_connections: int = settings.REDIS_MAX_CONNECTIONS
        self.socket_timeout: int = settings.REDIS_SOCKET_TIMEOUT
        self.socket_connect_timeout: int = settings.REDIS_CONNECT_TIMEOUT


class RedisConnectionManager:
    """
    Manages Redis connection pool and client lifecycle.

    Callers must await initialize() before get_client() and close()
    during shutdown.
    """

    def __init__(self, settings: Settings) -> None:
        self.config = RedisConfig(settings)
        self._client: Optional[Redis] = None
        self._pool: Optional[ConnectionPool] = None

    async def initialize(self) -> None:
        """
        Create the connection pool and client and verify connectivity.

        Raises:
            RedisError: If Redis cannot be reached
        """
        if self._client is not None:
            return

        pool_kwargs = {
            "host": self.config.host,
            "port": self.config.port,
            "db": self.config.db,
            "password": self.config.password,
            "max_connections": self.config.max_connections,
            "socket_timeout": self.config.socket_timeout,
            "socket_connect_timeout": self.config.socket_connect_timeout,
        }
        if self.config.username:
            pool_kwargs["username"] = self.config.username
        if self.config.ssl:
            from redis.asyncio.connection import SSLConnection

            pool_kwargs["connection_class"] = SSLConnection

        self._pool = ConnectionPool(**pool_kwargs)
        self._client = Redis(connection_pool=self._pool)

        await self._client.ping()
        logger.info(
            "Redis connected: %s:%d/%d (max_connections=%d)",
            self.config.host,
            self.config.port,
            self.config.db,
            self.config.max_connections,
        )

    def get_client(self) -> Redis:
        """
        Get the Redis client.

        Raises:
            RuntimeError: If initialize() has not completed
        """
        if self._client is None:
            raise RuntimeError("Redis connection manager not initialized")
        return self._client

    async def health_check(self) -> bool:
        """
        Check Redis health.

        Returns:
            True if healthy, False otherwise
        """
        if self._client is None:
            return False
        try:
            await self._client.ping()
            return True
        except RedisError as e:
            logger.error("Redis health check failed: %s", e)
            return False

    async def close(self) -> None:
        """Close Redis connection and clean up resources."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Redis client closed")

        if self._pool:
            await self._pool.disconnect()
            self._pool = None
            logger.info("Redis connection pool closed")
