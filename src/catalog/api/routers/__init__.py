"""API routers for the catalog service."""

from catalog.api.routers import health, metrics, products

__all__ = ["health", "metrics", "products"]
