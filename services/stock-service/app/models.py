"""
Database models for stock service.

This module defines the SQLAlchemy ORM model backing the stock price store.
"""

from typing import Any

from sqlalchemy import Column, DateTime, Integer, Numeric, String
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

from .domain.entities import PRICE_DECIMAL_PLACES, PRICE_MAX_DIGITS

Base: Any = declarative_base()


class Stock(Base):
    """
    Stock price record.

    Attributes:
        id: Primary key identifier
        ticker: Stock ticker symbol, unique across the table
        price: Current price
        updated_at: Timestamp of the last persist, refreshed on every update
    """

    __tablename__ = "stocks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticker = Column(String(20), unique=True, index=True, nullable=False)
    price = Column(Numeric(PRICE_MAX_DIGITS, PRICE_DECIMAL_PLACES), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<Stock(ticker='{self.ticker}', price={self.price})>"
