"""
Storage interface shared by the in-memory and relational backends.

This module defines the storage error hierarchy, the value objects handed to
the order unit of work, the narrow ``OrderStore``/``OrderUnitOfWork``
capability used by order creation, and the full ``Storage`` abstract base
class used by the catalog, customer and order endpoints.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional, Protocol, Sequence

from storefront.database.models import Category, Customer, Order, OrderItem, Product
from storefront.services.orders.enums import OrderStatus


class StorageError(Exception):
    """Base exception for storage errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context


class PersistenceError(StorageError):
    """Raised when the store rejects a write or cannot be reached."""

    pass


class ConflictError(PersistenceError):
    """Raised when a write violates a uniqueness or reference constraint."""

    pass


class RecordNotFoundError(StorageError):
    """Raised when a referenced record does not exist."""

    pass


class ProductNotFoundError(RecordNotFoundError):
    """Raised when a product id does not exist."""

    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found", product_id=product_id)
        self.product_id = product_id


@dataclass(frozen=True)
class OrderHeader:
    """
    Order header as proposed by the caller, before persistence.

    A missing total is filled in from the line items before the header
    reaches a unit of work.
    """

    customer_id: Optional[int] = None
    status: OrderStatus = OrderStatus.PENDING
    total: Optional[Decimal] = None


@dataclass(frozen=True)
class OrderLine:
    """Proposed order line item, before it is attached to an order."""

    product_id: int
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class OrderUnitOfWork(Protocol):
    """
    Storage operations available inside one order-creation transaction.

    Every call made through a unit of work commits or rolls back together.
    """

    async def insert_order(self, header: OrderHeader) -> Order:
        """Insert the order header and return it with id and order date."""
        ...

    async def insert_items(
        self, order_id: int, lines: Sequence[OrderLine]
    ) -> list[OrderItem]:
        """Insert all lines for an order as one batch, in the given order."""
        ...

    async def get_product_stock(self, product_id: int) -> int:
        """
        Read a product's stock, locking the row until the unit of work ends.

        Raises:
            ProductNotFoundError: If the product does not exist
        """
        ...

    async def set_product_stock(self, product_id: int, stock: int) -> None:
        """
        Overwrite a product's stock.

        Raises:
            ProductNotFoundError: If the product does not exist
        """
        ...


class OrderStore(Protocol):
    """Capability required by order creation: open a unit of work."""

    def transaction(self) -> AbstractAsyncContextManager[OrderUnitOfWork]:
        """
        Open a unit of work.

        The context manager commits on normal exit and rolls back when the
        block raises. Storage failures surface as ``PersistenceError``.
        """
        ...


class OrderRepository(OrderStore, Protocol):
    """Order creation plus the order reads and status change."""

    async def get_order(self, order_id: int) -> Optional[Order]: ...

    async def list_orders(self, customer_id: Optional[int] = None) -> list[Order]: ...

    async def update_order_status(
        self, order_id: int, status: OrderStatus
    ) -> Optional[Order]: ...


class Storage(ABC):
    """
    Complete storage backend for the storefront.

    Record-returning methods return ``None`` when the record does not exist;
    delete methods return ``False``. Writes that violate a uniqueness or
    reference constraint raise ``ConflictError``.
    """

    name: str = "storage"

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[OrderUnitOfWork]:
        """Open an order-creation unit of work."""

    @abstractmethod
    async def ping(self) -> bool:
        """Check that the backend is reachable."""

    async def close(self) -> None:
        """Release backend resources."""
        return None

    # Categories

    @abstractmethod
    async def list_categories(self) -> list[Category]: ...

    @abstractmethod
    async def get_category(self, category_id: int) -> Optional[Category]: ...

    @abstractmethod
    async def create_category(self, data: dict[str, Any]) -> Category: ...

    @abstractmethod
    async def update_category(
        self, category_id: int, data: dict[str, Any]
    ) -> Optional[Category]: ...

    @abstractmethod
    async def delete_category(self, category_id: int) -> bool: ...

    # Products

    @abstractmethod
    async def list_products(self, category_id: Optional[int] = None) -> list[Product]: ...

    @abstractmethod
    async def get_product(self, product_id: int) -> Optional[Product]: ...

    @abstractmethod
    async def list_low_stock_products(self, threshold: int) -> list[Product]:
        """Products whose stock is at or below ``threshold``, lowest stock first."""

    @abstractmethod
    async def create_product(self, data: dict[str, Any]) -> Product: ...

    @abstractmethod
    async def update_product(
        self, product_id: int, data: dict[str, Any]
    ) -> Optional[Product]:
        """Apply a partial update; keys absent from ``data`` are left unchanged."""

    @abstractmethod
    async def adjust_product_stock(self, product_id: int, delta: int) -> Optional[Product]:
        """Add a signed delta to a product's stock, clamping the result at zero."""

    @abstractmethod
    async def delete_product(self, product_id: int) -> bool: ...

    # Customers

    @abstractmethod
    async def list_customers(self) -> list[Customer]: ...

    @abstractmethod
    async def get_customer(self, customer_id: int) -> Optional[Customer]: ...

    @abstractmethod
    async def create_customer(self, data: dict[str, Any]) -> Customer: ...

    @abstractmethod
    async def update_customer(
        self, customer_id: int, data: dict[str, Any]
    ) -> Optional[Customer]: ...

    @abstractmethod
    async def delete_customer(self, customer_id: int) -> bool: ...

    # Orders

    @abstractmethod
    async def list_orders(self, customer_id: Optional[int] = None) -> list[Order]:
        """Order headers, newest first, optionally for one customer."""

    @abstractmethod
    async def get_order(self, order_id: int) -> Optional[Order]:
        """Order header with its line items loaded."""

    @abstractmethod
    async def get_order_items(self, order_id: int) -> list[OrderItem]: ...

    @abstractmethod
    async def update_order_status(
        self, order_id: int, status: OrderStatus
    ) -> Optional[Order]: ...


def clamp_stock(value: int) -> int:
    """Stock levels never go below zero."""
    return max(0, value)
