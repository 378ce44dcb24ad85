"""
Storage backends.

- base: storage interface, order unit-of-work protocol and storage errors
- memory: dictionary-backed backend for development and tests
- database: PostgreSQL backend on SQLAlchemy async sessions
"""

from storefront.storage.base import (
    ConflictError,
    OrderHeader,
    OrderLine,
    OrderRepository,
    OrderStore,
    OrderUnitOfWork,
    PersistenceError,
    ProductNotFoundError,
    RecordNotFoundError,
    Storage,
    StorageError,
)
from storefront.storage.memory import MemoryStorage

__all__ = [
    "ConflictError",
    "MemoryStorage",
    "OrderHeader",
    "OrderLine",
    "OrderRepository",
    "OrderStore",
    "OrderUnitOfWork",
    "PersistenceError",
    "ProductNotFoundError",
    "RecordNotFoundError",
    "Storage",
    "StorageError",
]
