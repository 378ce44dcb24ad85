"""
Relational storage backend on SQLAlchemy async sessions.

Each operation runs in its own session. Order creation runs inside one
``session.begin()`` block so the order, its line items and the stock updates
commit or roll back together; product rows are read with
``SELECT ... FOR UPDATE`` so concurrent orders for the same product serialize
on the row lock instead of losing updates.

SQLAlchemy errors never leave this module: integrity violations become
``ConflictError`` and every other database failure becomes
``PersistenceError``.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional, Sequence

from sqlalchemy import delete, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from storefront.core.logging import get_logger
from storefront.database.connection import dispose_engine, session_scope
from storefront.database.models import Category, Customer, Order, OrderItem, Product
from storefront.services.orders.enums import OrderStatus
from storefront.storage.base import (
    ConflictError,
    OrderHeader,
    OrderLine,
    PersistenceError,
    ProductNotFoundError,
    Storage,
    clamp_stock,
)

logger = get_logger(__name__)


def translate_error(error: Exception, operation: str, **context: Any) -> PersistenceError:
    """
    Map a SQLAlchemy error onto the storage error hierarchy.

    Args:
        error: Error raised by SQLAlchemy or the driver
        operation: Storage operation that failed
        **context: Identifiers to attach to the error

    Returns:
        ConflictError for integrity violations, PersistenceError otherwise
    """
    if isinstance(error, IntegrityError):
        logger.warning(
            "Storage write rejected - integrity error",
            operation=operation,
            error=str(error.orig),
            **context,
        )
        return ConflictError(
            f"{operation} violates a data integrity constraint",
            operation=operation,
            error=str(error.orig),
            **context,
        )

    logger.error(
        "Storage operation failed - database error",
        operation=operation,
        error=str(error),
        error_type=type(error).__name__,
        **context,
    )
    return PersistenceError(
        f"{operation} failed due to database error",
        operation=operation,
        error=str(error),
        **context,
    )


class DatabaseUnitOfWork:
    """Order-creation unit of work bound to one transactional session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert_order(self, header: OrderHeader) -> Order:
        order = Order(
            customer_id=header.customer_id,
            status=header.status,
            total=header.total,
        )
        self.session.add(order)
        await self.session.flush()
        # order_date is assigned by the server
        await self.session.refresh(order, ["order_date"])
        return order

    async def insert_items(
        self, order_id: int, lines: Sequence[OrderLine]
    ) -> list[OrderItem]:
        items = [
            OrderItem(
                order_id=order_id,
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
            )
            for line in lines
        ]
        self.session.add_all(items)
        await self.session.flush()
        return items

    async def get_product_stock(self, product_id: int) -> int:
        stmt = (
            select(Product.stock)
            .where(Product.id == product_id)
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        stock = result.scalar_one_or_none()
        if stock is None:
            raise ProductNotFoundError(product_id)
        return stock

    async def set_product_stock(self, product_id: int, stock: int) -> None:
        stmt = update(Product).where(Product.id == product_id).values(stock=stock)
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            raise ProductNotFoundError(product_id)


class DatabaseStorage(Storage):
    """
    Storage backed by PostgreSQL through SQLAlchemy async sessions.

    Args:
        session_factory: Factory producing async sessions
        engine: Engine behind the factory, disposed by ``close``
    """

    name = "database"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: Optional[AsyncEngine] = None,
    ):
        self.session_factory = session_factory
        self.engine = engine

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[DatabaseUnitOfWork]:
        session = self.session_factory()
        try:
            async with session.begin():
                yield DatabaseUnitOfWork(session)
        except (SQLAlchemyError, OSError) as e:
            raise translate_error(e, "order transaction") from e
        finally:
            await session.close()

    @asynccontextmanager
    async def _session(self, operation: str, **context: Any) -> AsyncIterator[AsyncSession]:
        try:
            async with session_scope(self.session_factory) as session:
                yield session
        except (SQLAlchemyError, OSError) as e:
            raise translate_error(e, operation, **context) from e

    async def close(self) -> None:
        if self.engine is not None:
            await dispose_engine(self.engine)
            self.engine = None

    async def ping(self) -> bool:
        try:
            async with self._session("ping") as session:
                await session.execute(text("SELECT 1"))
            return True
        except PersistenceError:
            return False

    async def _get(self, model: type, key: int, operation: str) -> Any:
        async with self._session(operation, record_id=key) as session:
            return await session.get(model, key)

    async def _create(self, model: type, data: dict[str, Any], operation: str) -> Any:
        async with self._session(operation) as session:
            record = model.from_dict(data)
            session.add(record)
            await session.flush()
            await session.refresh(record)
            return record

    async def _update(
        self, model: type, key: int, data: dict[str, Any], operation: str
    ) -> Any:
        async with self._session(operation, record_id=key) as session:
            record = await session.get(model, key)
            if record is None:
                return None
            columns = {attr.key for attr in model.__mapper__.column_attrs}
            for field, value in data.items():
                if field in columns and field != "id":
                    setattr(record, field, value)
            await session.flush()
            return record

    async def _delete(self, model: type, key: int, operation: str) -> bool:
        async with self._session(operation, record_id=key) as session:
            result = await session.execute(delete(model).where(model.id == key))
            return result.rowcount > 0

    # Categories

    async def list_categories(self) -> list[Category]:
        async with self._session("list categories") as session:
            result = await session.execute(select(Category).order_by(Category.id))
            return list(result.scalars().all())

    async def get_category(self, category_id: int) -> Optional[Category]:
        return await self._get(Category, category_id, "get category")

    async def create_category(self, data: dict[str, Any]) -> Category:
        return await self._create(Category, data, "create category")

    async def update_category(
        self, category_id: int, data: dict[str, Any]
    ) -> Optional[Category]:
        return await self._update(Category, category_id, data, "update category")

    async def delete_category(self, category_id: int) -> bool:
        return await self._delete(Category, category_id, "delete category")

    # Products

    async def list_products(self, category_id: Optional[int] = None) -> list[Product]:
        stmt = select(Product).order_by(Product.id)
        if category_id is not None:
            stmt = stmt.where(Product.category_id == category_id)

        async with self._session("list products", category_id=category_id) as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def get_product(self, product_id: int) -> Optional[Product]:
        return await self._get(Product, product_id, "get product")

    async def list_low_stock_products(self, threshold: int) -> list[Product]:
        stmt = select(Product).where(Product.stock <= threshold).order_by(Product.stock, Product.id)
        async with self._session("list low stock products", threshold=threshold) as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def create_product(self, data: dict[str, Any]) -> Product:
        return await self._create(Product, data, "create product")

    async def update_product(
        self, product_id: int, data: dict[str, Any]
    ) -> Optional[Product]:
        return await self._update(Product, product_id, data, "update product")

    async def adjust_product_stock(self, product_id: int, delta: int) -> Optional[Product]:
        async with self._session("adjust product stock", product_id=product_id) as session:
            stmt = select(Product).where(Product.id == product_id).with_for_update()
            product = (await session.execute(stmt)).scalar_one_or_none()
            if product is None:
                return None
            product.stock = clamp_stock(product.stock + delta)
            await session.flush()
            return product

    async def delete_product(self, product_id: int) -> bool:
        return await self._delete(Product, product_id, "delete product")

    # Customers

    async def list_customers(self) -> list[Customer]:
        async with self._session("list customers") as session:
            result = await session.execute(select(Customer).order_by(Customer.id))
            return list(result.scalars().all())

    async def get_customer(self, customer_id: int) -> Optional[Customer]:
        return await self._get(Customer, customer_id, "get customer")

    async def create_customer(self, data: dict[str, Any]) -> Customer:
        return await self._create(Customer, data, "create customer")

    async def update_customer(
        self, customer_id: int, data: dict[str, Any]
    ) -> Optional[Customer]:
        return await self._update(Customer, customer_id, data, "update customer")

    async def delete_customer(self, customer_id: int) -> bool:
        return await self._delete(Customer, customer_id, "delete customer")

    # Orders

    async def list_orders(self, customer_id: Optional[int] = None) -> list[Order]:
        stmt = select(Order).order_by(Order.id.desc())
        if customer_id is not None:
            stmt = stmt.where(Order.customer_id == customer_id)

        async with self._session("list orders", customer_id=customer_id) as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def get_order(self, order_id: int) -> Optional[Order]:
        return await self._get(Order, order_id, "get order")

    async def get_order_items(self, order_id: int) -> list[OrderItem]:
        stmt = select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.id)
        async with self._session("get order items", order_id=order_id) as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def update_order_status(
        self, order_id: int, status: OrderStatus
    ) -> Optional[Order]:
        return await self._update(Order, order_id, {"status": status}, "update order status")
