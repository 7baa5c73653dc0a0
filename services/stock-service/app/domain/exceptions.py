"""
Custom exceptions for the stock service domain.

These exceptions represent domain-level errors and are independent
of infrastructure concerns (HTTP, database, etc.). A missing ticker is
not an error and is reported as ``None`` by the service layer.
"""

from typing import Any, Optional


class StockServiceException(Exception):
    """Base exception for all stock service errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class StoreUnavailableException(StockServiceException):
    """Raised when the relational store cannot be reached or a query fails."""

    def __init__(self, operation: str, reason: Optional[str] = None):
        message = f"Store {operation} failed"
        if reason:
            message += f": {reason}"
        super().__init__(
            message=message, details={"operation": operation, "reason": reason}
        )


class CacheUnavailableException(StockServiceException):
    """Raised when Redis fails or returns a payload that cannot be decoded."""

    def __init__(self, operation: str, reason: Optional[str] = None):
        message = f"Cache {operation} failed"
        if reason:
            message += f": {reason}"
        super().__init__(
            message=message, details={"operation": operation, "reason": reason}
        )


class ValidationException(StockServiceException):
    """Raised when input validation fails."""

    def __init__(self, field: str, value: Any, reason: str):
        message = f"Validation failed for {field}: {reason}"
        super().__init__(
            message=message,
            details={"field": field, "value": str(value), "reason": reason},
        )
