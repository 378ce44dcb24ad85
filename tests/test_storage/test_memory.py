"""
Tests for the in-memory storage backend.
"""

from decimal import Decimal

import pytest

from storefront.services.orders.enums import OrderStatus
from storefront.storage.base import (
    ConflictError,
    OrderHeader,
    OrderLine,
    ProductNotFoundError,
)


class TestMemoryTransaction:
    """Tests for order units of work."""

    @pytest.mark.asyncio
    async def test_commit_publishes_changes(self, memory_storage, product_factory):
        product = await product_factory(stock=10)

        async with memory_storage.transaction() as uow:
            order = await uow.insert_order(OrderHeader(total=Decimal("24.99")))
            items = await uow.insert_items(
                order.id,
                [OrderLine(product_id=product.id, quantity=1, unit_price=Decimal("24.99"))],
            )
            await uow.set_product_stock(product.id, 9)

        stored = await memory_storage.get_order(order.id)
        assert stored.total == Decimal("24.99")
        assert stored.status == OrderStatus.PENDING
        assert stored.order_date is not None
        assert [item.id for item in stored.items] == [items[0].id]
        assert (await memory_storage.get_product(product.id)).stock == 9

    @pytest.mark.asyncio
    async def test_exception_discards_changes(self, memory_storage, product_factory):
        product = await product_factory(stock=10)

        with pytest.raises(RuntimeError):
            async with memory_storage.transaction() as uow:
                await uow.insert_order(OrderHeader(total=Decimal("1.00")))
                await uow.set_product_stock(product.id, 0)
                raise RuntimeError("boom")

        assert await memory_storage.list_orders() == []
        assert (await memory_storage.get_product(product.id)).stock == 10

    @pytest.mark.asyncio
    async def test_uncommitted_changes_are_not_visible(self, memory_storage, product_factory):
        product = await product_factory(stock=10)

        async with memory_storage.transaction() as uow:
            await uow.set_product_stock(product.id, 3)
            assert (await memory_storage.get_product(product.id)).stock == 10

        assert (await memory_storage.get_product(product.id)).stock == 3

    @pytest.mark.asyncio
    async def test_stock_of_unknown_product(self, memory_storage):
        async with memory_storage.transaction() as uow:
            with pytest.raises(ProductNotFoundError):
                await uow.get_product_stock(1)
            with pytest.raises(ProductNotFoundError):
                await uow.set_product_stock(1, 5)

    @pytest.mark.asyncio
    async def test_negative_stock_rejected(self, memory_storage, product_factory):
        product = await product_factory(stock=10)

        with pytest.raises(ConflictError):
            async with memory_storage.transaction() as uow:
                await uow.set_product_stock(product.id, -1)

    @pytest.mark.asyncio
    async def test_items_for_unknown_product_rejected(self, memory_storage):
        with pytest.raises(ConflictError):
            async with memory_storage.transaction() as uow:
                order = await uow.insert_order(OrderHeader(total=Decimal("1.00")))
                await uow.insert_items(
                    order.id,
                    [OrderLine(product_id=7, quantity=1, unit_price=Decimal("1.00"))],
                )


class TestMemoryCatalog:
    """Tests for category and product CRUD."""

    @pytest.mark.asyncio
    async def test_category_crud(self, memory_storage):
        category = await memory_storage.create_category({"name": "Wedding"})
        assert category.id == 1
        assert category.description is None

        updated = await memory_storage.update_category(
            category.id, {"name": "Weddings", "description": "Bridal flowers"}
        )
        assert updated.name == "Weddings"
        assert (await memory_storage.get_category(category.id)).description == "Bridal flowers"

        assert await memory_storage.delete_category(category.id) is True
        assert await memory_storage.get_category(category.id) is None
        assert await memory_storage.delete_category(category.id) is False

    @pytest.mark.asyncio
    async def test_category_with_products_cannot_be_deleted(self, memory_storage):
        category = await memory_storage.create_category({"name": "Fresh Flowers"})
        await memory_storage.create_product(
            {"name": "Red Roses", "sku": "RS-001", "price": Decimal("24.99"), "category_id": category.id}
        )

        with pytest.raises(ConflictError):
            await memory_storage.delete_category(category.id)

    @pytest.mark.asyncio
    async def test_product_defaults_and_filter(self, memory_storage):
        flowers = await memory_storage.create_category({"name": "Fresh Flowers"})
        plants = await memory_storage.create_category({"name": "Potted Plants"})
        rose = await memory_storage.create_product(
            {"name": "Red Roses", "sku": "RS-001", "price": Decimal("24.99"), "category_id": flowers.id}
        )
        await memory_storage.create_product(
            {"name": "Potted Orchid", "sku": "PO-053", "price": Decimal("45.00"), "category_id": plants.id}
        )

        assert rose.stock == 0
        assert [p.sku for p in await memory_storage.list_products()] == ["RS-001", "PO-053"]
        assert [p.sku for p in await memory_storage.list_products(category_id=flowers.id)] == ["RS-001"]

    @pytest.mark.asyncio
    async def test_duplicate_sku_rejected(self, memory_storage, product_factory):
        product = await product_factory()

        with pytest.raises(ConflictError):
            await memory_storage.create_product(
                {"name": "Copy", "sku": product.sku, "price": Decimal("1.00")}
            )

    @pytest.mark.asyncio
    async def test_unknown_category_rejected(self, memory_storage):
        with pytest.raises(ConflictError):
            await memory_storage.create_product(
                {"name": "Orphan", "sku": "OR-001", "price": Decimal("1.00"), "category_id": 9}
            )

    @pytest.mark.asyncio
    async def test_partial_product_update(self, memory_storage, product_factory):
        product = await product_factory(stock=4)

        updated = await memory_storage.update_product(product.id, {"price": Decimal("19.99")})

        assert updated.price == Decimal("19.99")
        assert updated.stock == 4
        assert updated.sku == product.sku
        assert await memory_storage.update_product(99, {"price": Decimal("1.00")}) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("column", ["name", "sku", "price", "stock"])
    async def test_update_cannot_null_required_column(
        self, memory_storage, product_factory, column
    ):
        product = await product_factory(stock=4)

        with pytest.raises(ConflictError):
            await memory_storage.update_product(product.id, {column: None})

        unchanged = await memory_storage.get_product(product.id)
        assert unchanged.to_dict() == product.to_dict()
        assert len(await memory_storage.list_products()) == 1

    @pytest.mark.asyncio
    async def test_create_product_requires_name(self, memory_storage):
        with pytest.raises(ConflictError):
            await memory_storage.create_product({"sku": "NN-001", "price": Decimal("1.00")})

        assert await memory_storage.list_products() == []

    @pytest.mark.asyncio
    async def test_customer_name_cannot_be_nulled(self, memory_storage):
        customer = await memory_storage.create_customer({"name": "Jane Smith"})

        with pytest.raises(ConflictError):
            await memory_storage.update_customer(customer.id, {"name": None})

        assert [c.name for c in await memory_storage.list_customers()] == ["Jane Smith"]
        updated = await memory_storage.update_customer(customer.id, {"email": None})
        assert updated.email is None

    @pytest.mark.asyncio
    async def test_category_name_cannot_be_nulled(self, memory_storage):
        category = await memory_storage.create_category({"name": "Wedding"})

        with pytest.raises(ConflictError):
            await memory_storage.update_category(category.id, {"name": None})

        assert (await memory_storage.get_category(category.id)).name == "Wedding"

    @pytest.mark.asyncio
    async def test_adjust_stock_clamps_at_zero(self, memory_storage, product_factory):
        product = await product_factory(stock=4)

        assert (await memory_storage.adjust_product_stock(product.id, 6)).stock == 10
        assert (await memory_storage.adjust_product_stock(product.id, -25)).stock == 0
        assert await memory_storage.adjust_product_stock(99, 1) is None

    @pytest.mark.asyncio
    async def test_low_stock_products(self, seeded_storage):
        low = await seeded_storage.list_low_stock_products(10)
        assert sorted(p.sku for p in low) == ["SC-087", "WB-024"]

    @pytest.mark.asyncio
    async def test_product_in_order_cannot_be_deleted(self, memory_storage, product_factory):
        product = await product_factory(stock=4)
        async with memory_storage.transaction() as uow:
            order = await uow.insert_order(OrderHeader(total=Decimal("1.00")))
            await uow.insert_items(
                order.id,
                [OrderLine(product_id=product.id, quantity=1, unit_price=Decimal("1.00"))],
            )

        with pytest.raises(ConflictError):
            await memory_storage.delete_product(product.id)


class TestMemoryCustomersAndOrders:
    """Tests for customers, order listing and status updates."""

    @pytest.mark.asyncio
    async def test_deleting_customer_keeps_orders(self, memory_storage):
        customer = await memory_storage.create_customer({"name": "John Doe"})
        async with memory_storage.transaction() as uow:
            order = await uow.insert_order(
                OrderHeader(customer_id=customer.id, total=Decimal("1.00"))
            )

        assert await memory_storage.delete_customer(customer.id) is True

        stored = await memory_storage.get_order(order.id)
        assert stored is not None
        assert stored.customer_id is None

    @pytest.mark.asyncio
    async def test_list_orders_newest_first(self, memory_storage):
        customer = await memory_storage.create_customer({"name": "Jane Smith"})
        async with memory_storage.transaction() as uow:
            await uow.insert_order(OrderHeader(total=Decimal("1.00")))
            await uow.insert_order(OrderHeader(customer_id=customer.id, total=Decimal("2.00")))
            await uow.insert_order(OrderHeader(total=Decimal("3.00")))

        assert [o.id for o in await memory_storage.list_orders()] == [3, 2, 1]
        assert [o.id for o in await memory_storage.list_orders(customer_id=customer.id)] == [2]

    @pytest.mark.asyncio
    async def test_update_order_status(self, memory_storage):
        async with memory_storage.transaction() as uow:
            order = await uow.insert_order(OrderHeader(total=Decimal("1.00")))

        updated = await memory_storage.update_order_status(order.id, OrderStatus.CANCELLED)

        assert updated.status == OrderStatus.CANCELLED
        assert await memory_storage.update_order_status(99, OrderStatus.CANCELLED) is None

    @pytest.mark.asyncio
    async def test_returned_models_are_copies(self, memory_storage, product_factory):
        product = await product_factory(stock=10)
        product.stock = 0

        assert (await memory_storage.get_product(product.id)).stock == 10
