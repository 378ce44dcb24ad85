"""
Tests for sample data loading.
"""

from decimal import Decimal

import pytest

from storefront.services.catalog.seed import seed_sample_data


class TestSeedSampleData:
    @pytest.mark.asyncio
    async def test_loads_sample_data(self, memory_storage):
        assert await seed_sample_data(memory_storage) is True

        categories = {c.id: c.name for c in await memory_storage.list_categories()}
        products = await memory_storage.list_products()
        customers = await memory_storage.list_customers()

        assert len(categories) == 4
        assert [(p.sku, p.stock) for p in products] == [
            ("RS-001", 78),
            ("TB-012", 42),
            ("PO-053", 12),
            ("WB-024", 5),
            ("SC-087", 0),
        ]
        assert products[0].price == Decimal("24.99")
        assert categories[products[4].category_id] == "Potted Plants"
        assert [c.name for c in customers] == ["Jane Smith", "John Doe"]

    @pytest.mark.asyncio
    async def test_skips_non_empty_store(self, seeded_storage):
        assert await seed_sample_data(seeded_storage) is False
        assert len(await seeded_storage.list_products()) == 5
