"""
Stock repository interfaces (Abstract Base Classes).

Define the contracts for the durable stock store and the stock cache
independent of the underlying storage mechanism.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Iterable, Optional

from ..domain.entities import StockRecord


class IStockRepository(ABC):
    """
    Durable store of stock price records keyed by ticker.

    Implementations raise StoreUnavailableException on any
    communication or query failure.
    """

    @abstractmethod
    async def find_by_ticker(self, ticker: str) -> Optional[StockRecord]:
        """
        Find a stock record by ticker.

        Args:
            ticker: Ticker symbol, matched exactly

        Returns:
            StockRecord if found, None otherwise
        """
        pass

    @abstractmethod
    async def update_price(self, ticker: str, price: Decimal) -> Optional[StockRecord]:
        """
        Set the price of an existing record and persist it.

        Persisting refreshes the record's update timestamp.

        Args:
            ticker: Ticker symbol
            price: New price

        Returns:
            The persisted record, or None if the ticker does not exist
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Return the number of stored records."""
        pass

    @abstractmethod
    async def add_all(self, prices: Iterable[tuple]) -> None:
        """
        Insert new records.

        Args:
            prices: (ticker, price) pairs
        """
        pass


class IStockCache(ABC):
    """
    TTL cache of stock records.

    Implementations raise CacheUnavailableException on any communication
    failure and on payloads that cannot be decoded.
    """

    @abstractmethod
    def build_key(self, ticker: str) -> str:
        """Build the cache key for a ticker."""
        pass

    @abstractmethod
    async def get(self, ticker: str) -> Optional[StockRecord]:
        """
        Read a cached record.

        Returns:
            The cached record, or None on a miss (absent, empty or expired)
        """
        pass

    @abstractmethod
    async def set(self, ticker: str, record: StockRecord) -> None:
        """Write a record, overwriting any existing entry and resetting its TTL."""
        pass
