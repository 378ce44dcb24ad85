"""
In-memory storage backend.

Rows are kept as plain dictionaries per table and materialized into the same
SQLAlchemy model classes the relational backend returns. The backend mirrors
the relational schema's constraints (unique SKU, foreign keys, non-negative
stock) so both backends accept and reject the same writes.

Order-creation units of work run against a private copy of the tables that
replaces the committed tables only when the unit of work succeeds, so readers
never observe a partially created order. All writers serialize on one lock.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Optional, Sequence

from storefront.core.logging import get_logger
from storefront.database.models import Category, Customer, Order, OrderItem, Product
from storefront.services.orders.enums import OrderStatus
from storefront.storage.base import (
    ConflictError,
    OrderHeader,
    OrderLine,
    ProductNotFoundError,
    Storage,
    clamp_stock,
)

logger = get_logger(__name__)

Row = dict[str, Any]


class MemoryTables:
    """Rows and id sequences for every table."""

    NAMES = ("categories", "products", "customers", "orders", "order_items")

    def __init__(
        self,
        rows: Optional[dict[str, dict[int, Row]]] = None,
        sequences: Optional[dict[str, int]] = None,
    ):
        self.rows = rows or {name: {} for name in self.NAMES}
        self.sequences = sequences or {name: 0 for name in self.NAMES}

    def copy(self) -> "MemoryTables":
        return MemoryTables(
            rows={
                name: {key: dict(row) for key, row in table.items()}
                for name, table in self.rows.items()
            },
            sequences=dict(self.sequences),
        )

    def insert(self, table: str, values: Row) -> Row:
        self.sequences[table] += 1
        row = dict(values)
        row["id"] = self.sequences[table]
        self.rows[table][row["id"]] = row
        return row

    def get(self, table: str, key: Optional[int]) -> Optional[Row]:
        if key is None:
            return None
        return self.rows[table].get(key)

    def select(self, table: str, **filters: Any) -> list[Row]:
        return [
            row
            for _, row in sorted(self.rows[table].items())
            if all(row.get(column) == value for column, value in filters.items())
        ]


def _check_not_null(model: type, values: Row) -> None:
    for column in model.__table__.columns:
        if column.primary_key or column.nullable:
            continue
        if values.get(column.key) is None:
            raise ConflictError(
                f"{model.__tablename__}.{column.key} cannot be null",
                column=column.key,
            )


def _build_order(tables: MemoryTables, row: Row) -> Order:
    order = Order.from_dict(row)
    order.items = [
        OrderItem.from_dict(item) for item in tables.select("order_items", order_id=row["id"])
    ]
    return order


class MemoryUnitOfWork:
    """Order-creation unit of work over a working copy of the tables."""

    def __init__(self, tables: MemoryTables):
        self.tables = tables

    async def insert_order(self, header: OrderHeader) -> Order:
        if header.customer_id is not None and not self.tables.get(
            "customers", header.customer_id
        ):
            raise ConflictError(
                "Order references a customer that does not exist",
                customer_id=header.customer_id,
            )

        row = self.tables.insert(
            "orders",
            {
                "customer_id": header.customer_id,
                "order_date": datetime.now(timezone.utc),
                "status": header.status,
                "total": header.total,
            },
        )
        return Order.from_dict(row)

    async def insert_items(
        self, order_id: int, lines: Sequence[OrderLine]
    ) -> list[OrderItem]:
        missing = [
            line.product_id
            for line in lines
            if not self.tables.get("products", line.product_id)
        ]
        if missing:
            raise ConflictError(
                "Order items reference products that do not exist",
                product_ids=missing,
            )

        return [
            OrderItem.from_dict(
                self.tables.insert(
                    "order_items",
                    {
                        "order_id": order_id,
                        "product_id": line.product_id,
                        "quantity": line.quantity,
                        "unit_price": line.unit_price,
                    },
                )
            )
            for line in lines
        ]

    async def get_product_stock(self, product_id: int) -> int:
        row = self.tables.get("products", product_id)
        if row is None:
            raise ProductNotFoundError(product_id)
        return row["stock"]

    async def set_product_stock(self, product_id: int, stock: int) -> None:
        row = self.tables.get("products", product_id)
        if row is None:
            raise ProductNotFoundError(product_id)
        if stock < 0:
            raise ConflictError(
                "Product stock cannot be negative",
                product_id=product_id,
                stock=stock,
            )
        row["stock"] = stock


class MemoryStorage(Storage):
    """
    Dictionary-backed storage for development and tests.

    Example:
        storage = MemoryStorage()
        async with storage.transaction() as uow:
            order = await uow.insert_order(OrderHeader(total=Decimal("9.99")))
    """

    name = "memory"

    def __init__(self) -> None:
        self._tables = MemoryTables()
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[MemoryUnitOfWork]:
        async with self._lock:
            working = self._tables.copy()
            yield MemoryUnitOfWork(working)
            self._tables = working
            logger.debug("Memory transaction committed")

    async def ping(self) -> bool:
        return True

    # Categories

    async def list_categories(self) -> list[Category]:
        return [Category.from_dict(row) for row in self._tables.select("categories")]

    async def get_category(self, category_id: int) -> Optional[Category]:
        row = self._tables.get("categories", category_id)
        return Category.from_dict(row) if row else None

    async def create_category(self, data: dict[str, Any]) -> Category:
        async with self._lock:
            values = Category.from_dict(data).to_dict()
            _check_not_null(Category, values)
            row = self._tables.insert("categories", values)
        return Category.from_dict(row)

    async def update_category(
        self, category_id: int, data: dict[str, Any]
    ) -> Optional[Category]:
        async with self._lock:
            row = self._tables.get("categories", category_id)
            if row is None:
                return None
            values = {**row, **self._writable(Category, data)}
            _check_not_null(Category, values)
            row.update(values)
        return Category.from_dict(row)

    async def delete_category(self, category_id: int) -> bool:
        async with self._lock:
            if category_id not in self._tables.rows["categories"]:
                return False
            if self._tables.select("products", category_id=category_id):
                raise ConflictError(
                    "Category is referenced by products",
                    category_id=category_id,
                )
            del self._tables.rows["categories"][category_id]
        return True

    # Products

    async def list_products(self, category_id: Optional[int] = None) -> list[Product]:
        filters = {} if category_id is None else {"category_id": category_id}
        return [Product.from_dict(row) for row in self._tables.select("products", **filters)]

    async def get_product(self, product_id: int) -> Optional[Product]:
        row = self._tables.get("products", product_id)
        return Product.from_dict(row) if row else None

    async def list_low_stock_products(self, threshold: int) -> list[Product]:
        rows = [row for row in self._tables.select("products") if row["stock"] <= threshold]
        rows.sort(key=lambda row: (row["stock"], row["id"]))
        return [Product.from_dict(row) for row in rows]

    async def create_product(self, data: dict[str, Any]) -> Product:
        async with self._lock:
            values = Product.from_dict(data).to_dict()
            self._check_product(values)
            row = self._tables.insert("products", values)
        return Product.from_dict(row)

    async def update_product(
        self, product_id: int, data: dict[str, Any]
    ) -> Optional[Product]:
        async with self._lock:
            row = self._tables.get("products", product_id)
            if row is None:
                return None
            values = {**row, **self._writable(Product, data)}
            self._check_product(values, product_id=product_id)
            row.update(values)
        return Product.from_dict(row)

    async def adjust_product_stock(self, product_id: int, delta: int) -> Optional[Product]:
        async with self._lock:
            row = self._tables.get("products", product_id)
            if row is None:
                return None
            row["stock"] = clamp_stock(row["stock"] + delta)
        return Product.from_dict(row)

    async def delete_product(self, product_id: int) -> bool:
        async with self._lock:
            if product_id not in self._tables.rows["products"]:
                return False
            if self._tables.select("order_items", product_id=product_id):
                raise ConflictError(
                    "Product is referenced by order items",
                    product_id=product_id,
                )
            del self._tables.rows["products"][product_id]
        return True

    # Customers

    async def list_customers(self) -> list[Customer]:
        return [Customer.from_dict(row) for row in self._tables.select("customers")]

    async def get_customer(self, customer_id: int) -> Optional[Customer]:
        row = self._tables.get("customers", customer_id)
        return Customer.from_dict(row) if row else None

    async def create_customer(self, data: dict[str, Any]) -> Customer:
        async with self._lock:
            values = Customer.from_dict(data).to_dict()
            _check_not_null(Customer, values)
            row = self._tables.insert("customers", values)
        return Customer.from_dict(row)

    async def update_customer(
        self, customer_id: int, data: dict[str, Any]
    ) -> Optional[Customer]:
        async with self._lock:
            row = self._tables.get("customers", customer_id)
            if row is None:
                return None
            values = {**row, **self._writable(Customer, data)}
            _check_not_null(Customer, values)
            row.update(values)
        return Customer.from_dict(row)

    async def delete_customer(self, customer_id: int) -> bool:
        async with self._lock:
            if customer_id not in self._tables.rows["customers"]:
                return False
            # orders.customer_id is ON DELETE SET NULL
            for order in self._tables.select("orders", customer_id=customer_id):
                order["customer_id"] = None
            del self._tables.rows["customers"][customer_id]
        return True

    # Orders

    async def list_orders(self, customer_id: Optional[int] = None) -> list[Order]:
        tables = self._tables
        filters = {} if customer_id is None else {"customer_id": customer_id}
        rows = tables.select("orders", **filters)
        return [_build_order(tables, row) for row in reversed(rows)]

    async def get_order(self, order_id: int) -> Optional[Order]:
        tables = self._tables
        row = tables.get("orders", order_id)
        return _build_order(tables, row) if row else None

    async def get_order_items(self, order_id: int) -> list[OrderItem]:
        return [
            OrderItem.from_dict(row)
            for row in self._tables.select("order_items", order_id=order_id)
        ]

    async def update_order_status(
        self, order_id: int, status: OrderStatus
    ) -> Optional[Order]:
        async with self._lock:
            row = self._tables.get("orders", order_id)
            if row is None:
                return None
            row["status"] = status
        return _build_order(self._tables, row)

    # Helpers

    @staticmethod
    def _writable(model: type, data: dict[str, Any]) -> Row:
        columns = {attr.key for attr in model.__mapper__.column_attrs}
        return {key: value for key, value in data.items() if key in columns and key != "id"}

    def _check_product(self, values: Row, product_id: Optional[int] = None) -> None:
        _check_not_null(Product, values)

        for row in self._tables.rows["products"].values():
            if row["sku"] == values.get("sku") and row["id"] != product_id:
                raise ConflictError("Product SKU already exists", sku=values.get("sku"))

        category_id = values.get("category_id")
        if category_id is not None and not self._tables.get("categories", category_id):
            raise ConflictError(
                "Product references a category that does not exist",
                category_id=category_id,
            )

        if values["stock"] < 0:
            raise ConflictError("Product stock cannot be negative", stock=values["stock"])
