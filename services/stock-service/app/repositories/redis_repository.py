"""
Redis implementation of the stock cache.

Stores JSON-serialized stock records under ``stock:{ticker}`` with a
fixed TTL. Expiry is left entirely to Redis.
"""

import json
import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ..domain.entities import StockRecord
from ..domain.exceptions import CacheUnavailableException
from .stock_repository import IStockCache

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "stock:"


class RedisStockCache(IStockCache):
    """
    Redis cache for stock records with TTL-based expiration.

    Errors are not swallowed: a Redis outage or a corrupt payload
    fails the calling request.
    """

    def __init__(self, redis_client: redis.Redis, ttl_seconds: int = 60):
        """
        Initialize Redis cache.

        Args:
            redis_client: Async Redis client
            ttl_seconds: Time-to-live for cache entries (default: 1 minute)
        """
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds

    def build_key(self, ticker: str) -> str:
        """
        Build cache key.

        Args:
            ticker: Ticker symbol, used verbatim

        Returns:
            Cache key in format: stock:{ticker}
        """
        return f"{CACHE_KEY_PREFIX}{ticker}"

    async def get(self, ticker: str) -> Optional[StockRecord]:
        """Find stock in Redis cache."""
        cache_key = self.build_key(ticker)
        try:
            cached_data = await self.redis.get(cache_key)
        except RedisError as e:
            logger.error("Error reading %s from Redis: %s", cache_key, e)
            raise CacheUnavailableException("get", str(e)) from e

        if not cached_data:
            logger.debug("Redis cache MISS: %s", cache_key)
            return None

        logger.info("Redis cache HIT: %s", cache_key)
        return self._deserialize(ticker, cached_data)

    async def set(self, ticker: str, record: StockRecord) -> None:
        """Save stock to Redis with TTL."""
        cache_key = self.build_key(ticker)
        try:
            await self.redis.set(cache_key, json.dumps(record.to_dict()), ex=self.ttl_seconds)
        except RedisError as e:
            logger.error("Error saving %s to Redis: %s", cache_key, e)
            raise CacheUnavailableException("set", str(e)) from e

        logger.info("Saved to Redis: %s (TTL: %ss)", cache_key, self.ttl_seconds)

    def _deserialize(self, ticker: str, cached_data) -> StockRecord:
        """Decode a cached payload, rejecting anything that is not this ticker's record."""
        cache_key = self.build_key(ticker)
        try:
            if isinstance(cached_data, bytes):
                cached_data = cached_data.decode("utf-8")
            data = json.loads(cached_data)
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            record = StockRecord.from_dict(data)
            if record.ticker != ticker:
                raise ValueError(f"payload is for ticker {record.ticker!r}")
            return record
        except ValueError as e:
            # UnicodeDecodeError and JSONDecodeError are both ValueErrors
            logger.error("Malformed payload under %s: %s", cache_key, e)
            raise CacheUnavailableException("decode", str(e)) from e
