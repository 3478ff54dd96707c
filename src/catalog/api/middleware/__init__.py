"""HTTP middleware for the catalog API."""

from catalog.api.middleware.correlation import CorrelationMiddleware

__all__ = ["CorrelationMiddleware"]
