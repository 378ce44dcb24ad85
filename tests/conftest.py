"""
Pytest configuration and shared test fixtures.

Provides test settings, in-memory storage fixtures and a FastAPI test client
bound to a fresh application instance per test.
"""

from decimal import Decimal
from typing import Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from storefront.api.deps import limiter
from storefront.core.config import Settings
from storefront.main import create_app
from storefront.services.catalog.seed import seed_sample_data
from storefront.storage.memory import MemoryStorage


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings for tests: in-memory storage, no sample data.

    Returns:
        Settings: Test configuration
    """
    return Settings(
        environment="test",
        storage_backend="memory",
        seed_sample_data=False,
        log_level="WARNING",
    )


@pytest.fixture
def memory_storage() -> MemoryStorage:
    """Empty in-memory storage."""
    return MemoryStorage()


@pytest_asyncio.fixture
async def seeded_storage() -> MemoryStorage:
    """
    In-memory storage loaded with the sample catalog.

    Product ids 1-5 are RS-001 (stock 78), TB-012 (42), PO-053 (12),
    WB-024 (5) and SC-087 (0); customer ids 1 and 2.
    """
    storage = MemoryStorage()
    await seed_sample_data(storage)
    return storage


@pytest_asyncio.fixture
async def product_factory(memory_storage: MemoryStorage):
    """
    Create products in ``memory_storage`` with a given stock level.

    Example:
        product = await product_factory(stock=10)
    """
    counter = {"n": 0}

    async def create(stock: int = 10, price: Decimal = Decimal("24.99")):
        counter["n"] += 1
        return await memory_storage.create_product(
            {
                "name": f"Product {counter['n']}",
                "sku": f"SKU-{counter['n']:03d}",
                "price": price,
                "stock": stock,
            }
        )

    return create


@pytest.fixture(autouse=True)
def reset_rate_limits() -> None:
    """Start every test with empty rate limit counters."""
    limiter.reset()


@pytest.fixture
def test_client(test_settings: Settings) -> Generator[TestClient, None, None]:
    """
    Test client for an application with an empty in-memory store.

    Yields:
        TestClient: Synchronous test client
    """
    with TestClient(create_app(settings=test_settings)) as client:
        yield client


@pytest.fixture
def seeded_client(test_settings: Settings) -> Generator[TestClient, None, None]:
    """
    Test client for an application whose in-memory store holds the sample
    catalog and customers.

    Yields:
        TestClient: Synchronous test client
    """
    settings = test_settings.model_copy(update={"seed_sample_data": True})
    with TestClient(create_app(settings=settings)) as client:
        yield client
