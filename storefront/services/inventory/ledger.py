"""
Inventory ledger for product stock levels.

The ledger reads and writes stock through an order unit of work and applies
the clamping policy: a decrement that would take stock below zero leaves the
product at zero instead of failing the order. It has no transaction semantics
of its own; atomicity belongs to the unit of work it is given.
"""

from dataclasses import dataclass
from typing import Iterable

from storefront.core.logging import get_logger
from storefront.storage.base import OrderUnitOfWork, clamp_stock

logger = get_logger(__name__)


@dataclass(frozen=True)
class StockChange:
    """Result of one stock decrement."""

    product_id: int
    requested: int
    before: int
    after: int

    @property
    def clamped(self) -> bool:
        """True when the product did not have enough stock for the request."""
        return self.before - self.requested < 0

    @property
    def shortfall(self) -> int:
        return max(0, self.requested - self.before)


class InventoryLedger:
    """
    Stock read/adjust operations over an order unit of work.

    Attributes:
        uow: Unit of work the ledger reads and writes through
    """

    def __init__(self, uow: OrderUnitOfWork):
        self.uow = uow

    async def get_stock(self, product_id: int) -> int:
        """
        Read a product's current stock.

        Raises:
            ProductNotFoundError: If the product does not exist
        """
        return await self.uow.get_product_stock(product_id)

    async def set_stock(self, product_id: int, value: int) -> None:
        """
        Overwrite a product's stock.

        Raises:
            ValueError: If value is negative
            ProductNotFoundError: If the product does not exist
        """
        if value < 0:
            raise ValueError(f"Stock cannot be negative, got {value}")
        await self.uow.set_product_stock(product_id, value)

    async def lock(self, product_ids: Iterable[int]) -> dict[int, int]:
        """
        Read and lock every distinct product, in ascending id order.

        Acquiring row locks in one global order keeps two orders that share
        products from deadlocking each other.

        Args:
            product_ids: Product ids referenced by an order

        Returns:
            Current stock keyed by product id

        Raises:
            ProductNotFoundError: For the first product that does not exist
        """
        return {
            product_id: await self.get_stock(product_id)
            for product_id in sorted(set(product_ids))
        }

    async def decrement(self, product_id: int, quantity: int) -> StockChange:
        """
        Remove ``quantity`` units from stock, clamping at zero.

        Args:
            product_id: Product to adjust
            quantity: Units to remove, must be positive

        Returns:
            StockChange describing the adjustment

        Raises:
            ValueError: If quantity is not positive
            ProductNotFoundError: If the product does not exist
        """
        if quantity <= 0:
            raise ValueError(f"Decrement quantity must be positive, got {quantity}")

        before = await self.get_stock(product_id)
        after = clamp_stock(before - quantity)
        await self.set_stock(product_id, after)

        change = StockChange(
            product_id=product_id,
            requested=quantity,
            before=before,
            after=after,
        )

        if change.clamped:
            logger.warning(
                "Stock clamped at zero",
                product_id=product_id,
                requested=quantity,
                available=before,
                shortfall=change.shortfall,
            )
        else:
            logger.debug(
                "Stock decremented",
                product_id=product_id,
                quantity=quantity,
                stock_before=before,
                stock_after=after,
            )

        return change
