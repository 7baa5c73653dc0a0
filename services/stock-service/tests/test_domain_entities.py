"""
Tests for domain entities and exceptions.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from app.domain.entities import StockRecord, validate_price
from app.domain.exceptions import (
    CacheUnavailableException,
    StockServiceException,
    StoreUnavailableException,
    ValidationException,
)


class TestStockRecord:
    """Test StockRecord value object."""

    def test_to_dict(self, sample_record):
        """Test cache representation uses strings for price and timestamp."""
        assert sample_record.to_dict() == {
            "ticker": "AAPL",
            "price": "150.0",
            "updated_at": "2024-01-01T12:00:00",
        }

    def test_from_dict(self):
        """Test record is rebuilt from its cached form."""
        record = StockRecord.from_dict(
            {"ticker": "MSFT", "price": "300.5", "updated_at": "2024-02-03T04:05:06"}
        )

        assert record.ticker == "MSFT"
        assert record.price == Decimal("300.5")
        assert record.updated_at == datetime(2024, 2, 3, 4, 5, 6)

    def test_from_dict_accepts_numeric_price(self):
        """Test numeric JSON prices are converted without float noise."""
        record = StockRecord.from_dict(
            {"ticker": "AAPL", "price": 150.1, "updated_at": "2024-01-01T00:00:00"}
        )
        assert record.price == Decimal("150.1")

    def test_is_immutable(self, sample_record):
        """Test records cannot be modified."""
        with pytest.raises(AttributeError):
            sample_record.price = Decimal("1")

    @pytest.mark.parametrize(
        "payload",
        [
            {"price": "1", "updated_at": "2024-01-01T00:00:00"},
            {"ticker": "AAPL", "updated_at": "2024-01-01T00:00:00"},
            {"ticker": "AAPL", "price": "1"},
            {"ticker": "AAPL", "price": "abc", "updated_at": "2024-01-01T00:00:00"},
            {"ticker": "AAPL", "price": "NaN", "updated_at": "2024-01-01T00:00:00"},
            {"ticker": "AAPL", "price": "1", "updated_at": "yesterday"},
            {"ticker": "AAPL", "price": "1", "updated_at": 12345},
            {"ticker": "", "price": "1", "updated_at": "2024-01-01T00:00:00"},
            {"ticker": 42, "price": "1", "updated_at": "2024-01-01T00:00:00"},
            {"ticker": "AAPL", "price": "0", "updated_at": "2024-01-01T00:00:00"},
            {"ticker": "AAPL", "price": "-150.0", "updated_at": "2024-01-01T00:00:00"},
            {"ticker": "AAPL", "price": "0.00001", "updated_at": "2024-01-01T00:00:00"},
        ],
    )
    def test_from_dict_rejects_malformed(self, payload):
        """Test malformed payloads raise ValueError."""
        with pytest.raises(ValueError):
            StockRecord.from_dict(payload)


class TestValidatePrice:
    """Test the store-precision price check."""

    @pytest.mark.parametrize(
        "price", ["0.0001", "150.1234", "150.12340000", "160", "99999999999999.9999"]
    )
    def test_accepts(self, price):
        assert validate_price(Decimal(price)) == Decimal(price)

    @pytest.mark.parametrize(
        "price", ["0", "-1", "0.00001", "150.123456", "100000000000000", "Infinity", "NaN"]
    )
    def test_rejects(self, price):
        with pytest.raises(ValueError):
            validate_price(Decimal(price))


class TestExceptions:
    """Test domain exception messages and details."""

    def test_store_unavailable(self):
        exc = StoreUnavailableException("find", "connection refused")

        assert isinstance(exc, StockServiceException)
        assert exc.message == "Store find failed: connection refused"
        assert exc.details == {"operation": "find", "reason": "connection refused"}

    def test_cache_unavailable_without_reason(self):
        exc = CacheUnavailableException("get")

        assert str(exc) == "Cache get failed"
        assert exc.details["reason"] is None

    def test_validation(self):
        exc = ValidationException("price", -1, "Price must be a positive number")

        assert "price" in exc.message
        assert exc.details["value"] == "-1"
