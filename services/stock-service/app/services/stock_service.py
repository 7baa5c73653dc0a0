"""
Business logic service layer.

Single entry point for reading and updating stock prices. Reads go
through the cache first (cache-aside); updates write the store and then
overwrite the cache (write-through).
"""

import asyncio
import logging
from decimal import Decimal
from typing import Optional, Union

from .. import metrics
from ..domain.entities import StockRecord, validate_price
from ..domain.exceptions import ValidationException
from ..repositories.stock_repository import IStockCache, IStockRepository

logger = logging.getLogger(__name__)


class StockService:
    """
    Stock price service with a cache-aside read path.

    There is no locking and no request coalescing: concurrent misses on
    the same ticker each read the store and overwrite the cache, and
    concurrent updates race with last-writer-wins semantics. Store and
    cache errors propagate unchanged.
    """

    def __init__(
        self,
        repository: IStockRepository,
        cache: IStockCache,
        simulated_store_latency_ms: int = 0,
    ):
        """
        Initialize stock service.

        Args:
            repository: Durable stock store
            cache: Stock cache
            simulated_store_latency_ms: Delay before each cache-miss store read
        """
        self.repository = repository
        self.cache = cache
        self.simulated_store_latency_ms = simulated_store_latency_ms

    async def get_stock(self, ticker: str) -> Optional[StockRecord]:
        """
        Get the current record for a ticker.

        Args:
            ticker: Ticker symbol, already validated by the caller

        Returns:
            The cached record on a hit, the stored record on a miss,
            or None when the ticker does not exist
        """
        cached = await self.cache.get(ticker)
        if cached is not None:
            metrics.cache_hits_total.inc()
            logger.info("Cache hit for %s", ticker)
            return cached

        metrics.cache_misses_total.inc()
        logger.info("Cache miss for %s, reading store", ticker)

        if self.simulated_store_latency_ms:
            await asyncio.sleep(self.simulated_store_latency_ms / 1000)

        stock = await self.repository.find_by_ticker(ticker)
        metrics.store_reads_total.inc()

        if stock is None:
            logger.info("Stock %s not found in store", ticker)
            return None

        await self.cache.set(ticker, stock)
        metrics.cache_writes_total.labels(path="read").inc()
        return stock

    async def update_stock(
        self, ticker: str, price: Union[Decimal, float, int]
    ) -> Optional[StockRecord]:
        """
        Update the price of an existing ticker.

        The store is written first, then the cache entry is overwritten
        regardless of whether one existed.

        Args:
            ticker: Ticker symbol
            price: New price, must be positive

        Returns:
            The persisted record, or None when the ticker does not exist

        Raises:
            ValidationException: If price is not a positive finite number
                that fits the store precision
        """
        price = self._to_decimal(price)

        stock = await self.repository.update_price(ticker, price)
        if stock is None:
            metrics.stock_updates_total.labels(result="not_found").inc()
            logger.info("Update skipped, stock %s not found", ticker)
            return None

        await self.cache.set(ticker, stock)
        metrics.cache_writes_total.labels(path="write").inc()
        metrics.stock_updates_total.labels(result="updated").inc()

        logger.info("Updated %s to %s", ticker, stock.price)
        return stock

    @staticmethod
    def _to_decimal(price: Union[Decimal, float, int]) -> Decimal:
        if isinstance(price, bool):
            raise ValidationException("price", price, "Price must be a number")
        try:
            value = price if isinstance(price, Decimal) else Decimal(str(price))
        except ArithmeticError:
            raise ValidationException("price", price, "Price must be a number")
        try:
            return validate_price(value)
        except ValueError as e:
            raise ValidationException("price", price, str(e).capitalize())
