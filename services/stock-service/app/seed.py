"""
First-run seeding of the stock store.

Inserts a small set of well-known tickers when the table is empty so the
service is usable right after the first start.
"""

from decimal import Decimal
from typing import Iterable, Tuple

import structlog

from .repositories.stock_repository import IStockRepository

logger = structlog.get_logger(__name__)

DEFAULT_STOCKS: Tuple[Tuple[str, Decimal], ...] = (
    ("AAPL", Decimal("150.0")),
    ("MSFT", Decimal("300.0")),
)


async def seed_stocks(
    repository: IStockRepository,
    stocks: Iterable[Tuple[str, Decimal]] = DEFAULT_STOCKS,
) -> int:
    """
    Insert seed stocks if the store is empty.

    Args:
        repository: Stock store to seed
        stocks: (ticker, price) pairs to insert

    Returns:
        Number of inserted records (0 when the store already had data)
    """
    logger.info("Checking if seed data is needed")

    existing = await repository.count()
    if existing:
        logger.info("Store already contains data, skipping seeding", count=existing)
        return 0

    stocks = list(stocks)
    await repository.add_all(stocks)
    logger.info("Seed data inserted", tickers=[ticker for ticker, _ in stocks])
    return len(stocks)
