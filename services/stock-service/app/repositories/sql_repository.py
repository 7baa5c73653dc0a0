"""
SQLAlchemy implementation of the stock repository.

Implements persistent storage for stock price records.
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.entities import StockRecord
from ..domain.exceptions import StoreUnavailableException
from ..models import Stock
from .stock_repository import IStockRepository

logger = logging.getLogger(__name__)


class SqlStockRepository(IStockRepository):
    """Relational implementation for stock price persistence."""

    def __init__(self, db: AsyncSession):
        """
        Initialize repository.

        Args:
            db: SQLAlchemy async session
        """
        self.db = db

    async def find_by_ticker(self, ticker: str) -> Optional[StockRecord]:
        """Find stock by ticker."""
        try:
            stock = await self._get_row(ticker)
        except SQLAlchemyError as e:
            logger.error("Error finding stock %s in store: %s", ticker, e)
            raise StoreUnavailableException("find", str(e)) from e

        if stock is None:
            return None
        return self._map_to_entity(stock)

    async def update_price(self, ticker: str, price: Decimal) -> Optional[StockRecord]:
        """Update the price of an existing stock and return the persisted row."""
        try:
            stock = await self._get_row(ticker)
            if stock is None:
                return None

            stock.price = price
            # Touch the timestamp even when the price is unchanged
            stock.updated_at = func.now()

            await self.db.commit()
            await self.db.refresh(stock)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Error updating stock %s in store: %s", ticker, e)
            raise StoreUnavailableException("update", str(e)) from e

        logger.debug("Persisted %s at price %s", ticker, price)
        return self._map_to_entity(stock)

    async def count(self) -> int:
        """Count stored stocks."""
        try:
            result = await self.db.execute(select(func.count(Stock.id)))
            return result.scalar_one()
        except SQLAlchemyError as e:
            logger.error("Error counting stocks: %s", e)
            raise StoreUnavailableException("count", str(e)) from e

    async def add_all(self, prices: Iterable[tuple]) -> None:
        """Insert new stocks in a single transaction."""
        try:
            self.db.add_all(
                [Stock(ticker=ticker, price=Decimal(str(price))) for ticker, price in prices]
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Error inserting stocks: %s", e)
            raise StoreUnavailableException("insert", str(e)) from e

    async def _get_row(self, ticker: str) -> Optional[Stock]:
        result = await self.db.execute(select(Stock).where(Stock.ticker == ticker))
        return result.scalar_one_or_none()

    def _map_to_entity(self, stock: Stock) -> StockRecord:
        """Map database model to domain entity."""
        return StockRecord(
            ticker=stock.ticker,
            price=Decimal(stock.price),
            updated_at=stock.updated_at,
        )
