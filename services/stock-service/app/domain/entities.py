"""
Domain entities for stock data.

Core business objects representing a stock price record.
These entities are framework-agnostic and contain only business logic.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict

# Precision of the stored price column; anything finer would be rounded.
PRICE_MAX_DIGITS = 18
PRICE_DECIMAL_PLACES = 4


def validate_price(price: Decimal) -> Decimal:
    """
    Check that a price is positive and representable by the store.

    Args:
        price: Candidate price

    Returns:
        The price, unchanged

    Raises:
        ValueError: If the price is not finite, not positive, has more than
            PRICE_DECIMAL_PLACES decimals or too many integer digits
    """
    if not price.is_finite():
        raise ValueError("price must be finite")
    if price <= 0:
        raise ValueError("price must be positive")

    normalized = price.normalize()
    if normalized.as_tuple().exponent < -PRICE_DECIMAL_PLACES:
        raise ValueError(f"price must have at most {PRICE_DECIMAL_PLACES} decimal places")
    if normalized.adjusted() >= PRICE_MAX_DIGITS - PRICE_DECIMAL_PLACES:
        raise ValueError(
            f"price must have at most {PRICE_MAX_DIGITS - PRICE_DECIMAL_PLACES} integer digits"
        )
    return price


@dataclass(frozen=True)
class StockRecord:
    """
    Current price of a single ticker.

    Immutable so that a record handed out by the cache or the store
    cannot be changed behind the caller's back.
    """

    ticker: str
    price: Decimal
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON-compatible representation stored in the cache."""
        return {
            "ticker": self.ticker,
            "price": str(self.price),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StockRecord":
        """
        Build a record from its cached representation.

        Raises:
            ValueError: If a field is missing or has the wrong shape
        """
        try:
            ticker = data["ticker"]
            price = Decimal(str(data["price"]))
            updated_at = datetime.fromisoformat(data["updated_at"])
        except (KeyError, TypeError, InvalidOperation) as e:
            raise ValueError(f"Malformed stock payload: {e!r}") from e

        if not isinstance(ticker, str) or not ticker:
            raise ValueError("Malformed stock payload: ticker must be a non-empty string")
        try:
            validate_price(price)
        except ValueError as e:
            raise ValueError(f"Malformed stock payload: {e}") from e

        return cls(ticker=ticker, price=price, updated_at=updated_at)
