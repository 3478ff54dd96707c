"""Persistence layer for the catalog API.

This module provides:
- Async PostgreSQL engine and session factory
- SQLAlchemy ORM model for products
- Product repository consumed by the cache-aside read path
"""

from catalog.persistence.db import (
    close_db,
    get_engine,
    get_session,
    init_db,
    standalone_session,
)
from catalog.persistence.repositories import ProductRepository, product_reader
from catalog.persistence.tables import Base, ProductTable

__all__ = [
    # DB
    "get_engine",
    "get_session",
    "init_db",
    "close_db",
    "standalone_session",
    # Tables
    "Base",
    "ProductTable",
    # Repositories
    "ProductRepository",
    "product_reader",
]
