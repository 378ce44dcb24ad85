"""
Order service coordinating order creation and status changes.

Order creation is the one multi-record write in the storefront: the order
header, every line item and the stock level of every ordered product change
together inside a single unit of work, or none of them change. Stock is
decremented with clamping, so an order for more units than are in stock is
accepted and leaves the product at zero.
"""

from dataclasses import replace
from decimal import Decimal
from typing import Any, Optional, Sequence

from sqlalchemy.orm.attributes import set_committed_value

from storefront.core.config import Settings, get_settings
from storefront.core.logging import get_logger, log_performance
from storefront.database.models import Order
from storefront.services.inventory.ledger import InventoryLedger, StockChange
from storefront.services.orders.enums import OrderStatus
from storefront.storage.base import (
    OrderHeader,
    OrderLine,
    OrderRepository,
    PersistenceError,
    ProductNotFoundError,
)

logger = get_logger(__name__)


class OrderServiceError(Exception):
    """Base exception for order service errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context


class OrderValidationError(OrderServiceError):
    """Raised when an order request is invalid; nothing is persisted."""

    pass


class OrderCreationError(OrderServiceError):
    """Raised when an order could not be persisted; the transaction rolled back."""

    pass


class OrderNotFoundError(OrderServiceError):
    """Raised when an order does not exist."""

    pass


def calculate_total(lines: Sequence[OrderLine]) -> Decimal:
    """Sum of quantity times unit price over all lines."""
    return sum((line.line_total for line in lines), Decimal("0"))


class OrderService:
    """
    Order service orchestrating order persistence and stock adjustment.

    ``create_order`` only needs the store's ``transaction()`` capability;
    the remaining operations read orders and change their status.

    Attributes:
        store: Order store, any ``Storage`` backend qualifies
        settings: Application settings
    """

    def __init__(self, store: OrderRepository, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()

    async def create_order(
        self,
        header: OrderHeader,
        lines: Sequence[OrderLine],
    ) -> Order:
        """
        Create an order with its line items and decrement product stock.

        Args:
            header: Proposed order header
            lines: Proposed line items, persisted in the given order

        Returns:
            Persisted order with id, order date and items attached

        Raises:
            OrderValidationError: Empty items, invalid lines, an unknown
                product or a rejected total mismatch
            OrderCreationError: If the storage layer fails to persist the order
        """
        self._validate_lines(lines)
        header = self._resolve_total(header, lines)

        logger.info(
            "Creating order",
            customer_id=header.customer_id,
            line_count=len(lines),
            total=str(header.total),
        )

        try:
            async with log_performance(logger, "create_order", line_count=len(lines)):
                async with self.store.transaction() as uow:
                    ledger = InventoryLedger(uow)

                    order = await uow.insert_order(header)
                    await ledger.lock(line.product_id for line in lines)
                    items = await uow.insert_items(order.id, lines)

                    changes: list[StockChange] = []
                    for line in lines:
                        changes.append(await ledger.decrement(line.product_id, line.quantity))

        except ProductNotFoundError as e:
            logger.warning(
                "Order rejected - unknown product",
                product_id=e.product_id,
            )
            raise OrderValidationError(
                f"Product {e.product_id} does not exist",
                product_id=e.product_id,
            ) from e

        except PersistenceError as e:
            logger.error(
                "Order creation failed",
                customer_id=header.customer_id,
                error=str(e),
                context=e.context,
            )
            raise OrderCreationError(
                "Failed to create order",
                customer_id=header.customer_id,
                error=str(e),
            ) from e

        set_committed_value(order, "items", items)

        logger.info(
            "Order created successfully",
            order_id=order.id,
            item_count=len(items),
            total=str(order.total),
            clamped_products=[change.product_id for change in changes if change.clamped],
        )

        return order

    async def get_order(self, order_id: int) -> Order:
        """
        Get an order with its line items.

        Raises:
            OrderNotFoundError: If the order does not exist
        """
        order = await self.store.get_order(order_id)
        if order is None:
            raise OrderNotFoundError("Order not found", order_id=order_id)
        return order

    async def list_orders(self, customer_id: Optional[int] = None) -> list[Order]:
        return await self.store.list_orders(customer_id=customer_id)

    async def update_order_status(self, order_id: int, status: OrderStatus) -> Order:
        """
        Set an order's status. Any status may follow any other.

        Raises:
            OrderNotFoundError: If the order does not exist
        """
        order = await self.store.update_order_status(order_id, status)
        if order is None:
            raise OrderNotFoundError("Order not found", order_id=order_id)

        logger.info(
            "Order status updated",
            order_id=order_id,
            new_status=status.value,
        )
        return order

    def _validate_lines(self, lines: Sequence[OrderLine]) -> None:
        if not lines:
            raise OrderValidationError("Order must contain at least one item")

        for index, line in enumerate(lines):
            if line.quantity <= 0:
                raise OrderValidationError(
                    "Item quantity must be positive",
                    index=index,
                    quantity=line.quantity,
                )
            if line.unit_price < 0:
                raise OrderValidationError(
                    "Item unit price cannot be negative",
                    index=index,
                    unit_price=str(line.unit_price),
                )

    def _resolve_total(
        self, header: OrderHeader, lines: Sequence[OrderLine]
    ) -> OrderHeader:
        computed = calculate_total(lines)

        if header.total is None:
            return replace(header, total=computed)

        if header.total < 0:
            raise OrderValidationError(
                "Order total cannot be negative",
                total=str(header.total),
            )

        if header.total != computed:
            if self.settings.order_total_mismatch_policy == "reject":
                raise OrderValidationError(
                    "Order total does not match its items",
                    total=str(header.total),
                    computed_total=str(computed),
                )
            logger.warning(
                "Order total differs from item sum",
                total=str(header.total),
                computed_total=str(computed),
            )

        return header
