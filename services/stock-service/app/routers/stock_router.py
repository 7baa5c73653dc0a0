"""
Stock price API router.

Thin HTTP adapter over StockService:
- GET /stocks/{ticker}: read through the cache
- POST /stocks/{ticker}: update the price and refresh the cache
"""

from datetime import datetime
from decimal import Decimal

import structlog
from fastapi import APIRouter, Depends, HTTPException, Path, status
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..dependencies import get_stock_service
from ..domain.entities import StockRecord, validate_price
from ..services.stock_service import StockService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/stocks", tags=["stocks"])


class UpdateStockRequest(BaseModel):
    """Body of a price update."""

    price: float = Field(
        ...,
        gt=0,
        strict=True,
        allow_inf_nan=False,
        description="New price, a positive number with at most 4 decimal places",
        json_schema_extra={"example": 160.0},
    )

    @field_validator("price")
    @classmethod
    def validate_price_precision(cls, v: float) -> float:
        """Reject prices the store would have to round."""
        validate_price(Decimal(str(v)))
        return v


class StockResponse(BaseModel):
    """Stock record response model."""

    ticker: str = Field(..., description="Stock ticker symbol")
    price: float = Field(..., description="Current price")
    updated_at: datetime = Field(..., description="Time of the last update")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"ticker": "AAPL", "price": 150.0, "updated_at": "2024-01-01T12:00:00"}
        }
    )

    @classmethod
    def from_record(cls, record: StockRecord) -> "StockResponse":
        return cls(ticker=record.ticker, price=float(record.price), updated_at=record.updated_at)


def _not_found(ticker: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "success": False,
            "error": "not_found",
            "message": f"Stock not found: {ticker}",
            "details": {"ticker": ticker},
        },
    )


@router.get(
    "/{ticker}",
    response_model=StockResponse,
    summary="Get stock",
    description="Return the current price of a ticker, served from cache when possible",
)
async def get_stock(
    ticker: str = Path(..., min_length=1, max_length=20),
    service: StockService = Depends(get_stock_service),
) -> StockResponse:
    logger.info("GET stock request received", ticker=ticker)

    stock = await service.get_stock(ticker)
    if stock is None:
        raise _not_found(ticker)

    return StockResponse.from_record(stock)


@router.post(
    "/{ticker}",
    response_model=StockResponse,
    summary="Update stock",
    description="Set the price of an existing ticker and overwrite its cache entry",
)
async def update_stock(
    body: UpdateStockRequest,
    ticker: str = Path(..., min_length=1, max_length=20),
    service: StockService = Depends(get_stock_service),
) -> StockResponse:
    logger.info("POST stock request received", ticker=ticker, price=body.price)

    stock = await service.update_stock(ticker, body.price)
    if stock is None:
        raise _not_found(ticker)

    return StockResponse.from_record(stock)
