"""
API routers for stock service endpoints.
"""

from . import health_router, stock_router

__all__ = ["stock_router", "health_router"]
