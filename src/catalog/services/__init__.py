"""Application services for the catalog API."""

from catalog.services.catalog import CatalogService, MutationResult, ProductSource

__all__ = ["CatalogService", "MutationResult", "ProductSource"]
