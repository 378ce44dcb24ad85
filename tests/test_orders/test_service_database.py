"""
Tests for OrderService order creation on the relational backend.

The async session is mocked; product rows live in a small in-test table so
the row-lock reads and stock updates the unit of work issues can be checked
in the order they reach the database.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import Select
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database.models import Order
from storefront.services.orders.service import (
    OrderCreationError,
    OrderService,
    OrderValidationError,
)
from storefront.storage.base import ConflictError, OrderHeader, OrderLine, ProductNotFoundError
from storefront.storage.database import DatabaseStorage


class ProductRows:
    """Product stock table answering the statements a unit of work executes."""

    def __init__(self, stock: dict[int, int]):
        self.stock = dict(stock)
        self.locked: list[int] = []
        self.updates: list[tuple[int, int]] = []

    async def execute(self, statement):
        params = statement.compile().params
        product_id = params["id_1"]

        if isinstance(statement, Select):
            assert "FOR UPDATE" in str(statement.compile(dialect=postgresql.dialect()))
            self.locked.append(product_id)
            result = MagicMock()
            result.scalar_one_or_none.return_value = self.stock.get(product_id)
            return result

        self.stock[product_id] = params["stock"]
        self.updates.append((product_id, params["stock"]))
        return MagicMock(rowcount=1)


@pytest.fixture
def mock_session() -> AsyncMock:
    """
    Create mock async database session.

    Orders get id 42 when added.
    """
    session = AsyncMock(spec=AsyncSession)
    session.close = AsyncMock()

    def add(record):
        if isinstance(record, Order):
            record.id = 42

    session.add.side_effect = add
    return session


@pytest.fixture
def order_service(mock_session, test_settings) -> OrderService:
    storage = DatabaseStorage(MagicMock(return_value=mock_session))
    return OrderService(storage, test_settings)


def line(product_id: int, quantity: int) -> OrderLine:
    return OrderLine(product_id=product_id, quantity=quantity, unit_price=Decimal("5.00"))


def transaction_exit_type(session: AsyncMock):
    """Exception type the ``session.begin()`` block exited with."""
    return session.begin.return_value.__aexit__.await_args.args[0]


class TestCreateOrderOnDatabase:
    @pytest.mark.asyncio
    async def test_locks_ascending_then_decrements_in_line_order(
        self, order_service, mock_session
    ):
        rows = ProductRows({1: 4, 3: 10})
        mock_session.execute.side_effect = rows.execute

        order = await order_service.create_order(OrderHeader(), [line(3, 2), line(1, 5)])

        assert rows.locked == [1, 3, 3, 1]
        assert rows.updates == [(3, 8), (1, 0)]
        assert order.id == 42
        assert order.total == Decimal("35.00")
        assert [(i.order_id, i.product_id, i.quantity) for i in order.items] == [
            (42, 3, 2),
            (42, 1, 5),
        ]
        mock_session.begin.assert_called_once()
        assert transaction_exit_type(mock_session) is None
        mock_session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_product_rolls_back_before_items(self, order_service, mock_session):
        rows = ProductRows({1: 4})
        mock_session.execute.side_effect = rows.execute

        with pytest.raises(OrderValidationError) as exc_info:
            await order_service.create_order(OrderHeader(), [line(7, 1), line(1, 1)])

        assert exc_info.value.context == {"product_id": 7}
        assert rows.locked == [1, 7]
        assert rows.updates == []
        mock_session.add_all.assert_not_called()
        assert transaction_exit_type(mock_session) is ProductNotFoundError
        mock_session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_integrity_error_is_not_persisted(self, order_service, mock_session):
        rows = ProductRows({1: 4})
        mock_session.execute.side_effect = rows.execute
        mock_session.flush.side_effect = IntegrityError(
            "INSERT INTO orders", {}, Exception("customer fk violation")
        )

        with pytest.raises(OrderCreationError) as exc_info:
            await order_service.create_order(OrderHeader(customer_id=99), [line(1, 1)])

        assert isinstance(exc_info.value.__cause__, ConflictError)
        assert rows.locked == []
        assert rows.stock == {1: 4}
        assert transaction_exit_type(mock_session) is IntegrityError
        mock_session.close.assert_awaited_once()
