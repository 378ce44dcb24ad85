"""
Sample catalog and customer data loaded into an empty store on start-up.
"""

from decimal import Decimal
from typing import Any

from storefront.core.logging import get_logger
from storefront.storage.base import Storage

logger = get_logger(__name__)

SAMPLE_CATEGORIES: list[dict[str, Any]] = [
    {"name": "Fresh Flowers", "description": "Individual fresh cut flowers"},
    {"name": "Arrangements", "description": "Custom flower arrangements"},
    {"name": "Potted Plants", "description": "Live potted plants"},
    {"name": "Wedding", "description": "Wedding flowers and arrangements"},
]

_IMAGE_QUERY = "?ixlib=rb-1.2.1&auto=format&fit=crop&w=1000&q=80"

# category is resolved to an id by name when seeding
SAMPLE_PRODUCTS: list[dict[str, Any]] = [
    {
        "name": "Red Roses",
        "description": "Beautiful long-stem red roses",
        "sku": "RS-001",
        "price": Decimal("24.99"),
        "image_url": f"https://images.unsplash.com/photo-1564201716775-851813f7fc82{_IMAGE_QUERY}",
        "category": "Fresh Flowers",
        "stock": 78,
    },
    {
        "name": "Tulip Bouquet",
        "description": "Colorful tulip bouquet with assorted colors",
        "sku": "TB-012",
        "price": Decimal("32.99"),
        "image_url": f"https://images.unsplash.com/photo-1561181286-d5c73431a97f{_IMAGE_QUERY}",
        "category": "Arrangements",
        "stock": 42,
    },
    {
        "name": "Potted Orchid",
        "description": "Elegant potted orchid plant",
        "sku": "PO-053",
        "price": Decimal("45.00"),
        "image_url": f"https://images.unsplash.com/photo-1584589167171-541ce45f1eea{_IMAGE_QUERY}",
        "category": "Potted Plants",
        "stock": 12,
    },
    {
        "name": "Wedding Bouquet",
        "description": "Classic white wedding bouquet",
        "sku": "WB-024",
        "price": Decimal("129.99"),
        "image_url": f"https://images.unsplash.com/photo-1558350315-8aa00e8e4590{_IMAGE_QUERY}",
        "category": "Wedding",
        "stock": 5,
    },
    {
        "name": "Succulent Collection",
        "description": "Set of 3 small succulents in decorative pots",
        "sku": "SC-087",
        "price": Decimal("36.50"),
        "image_url": f"https://images.unsplash.com/photo-1575773476816-873ad10f4908{_IMAGE_QUERY}",
        "category": "Potted Plants",
        "stock": 0,
    },
]

SAMPLE_CUSTOMERS: list[dict[str, Any]] = [
    {
        "name": "Jane Smith",
        "email": "jane.smith@example.com",
        "phone": "555-123-4567",
        "address": "123 Main St, Anytown, USA",
    },
    {
        "name": "John Doe",
        "email": "john.doe@example.com",
        "phone": "555-987-6543",
        "address": "456 Oak Ave, Somewhere, USA",
    },
]


async def seed_sample_data(storage: Storage) -> bool:
    """
    Load sample categories, products and customers into an empty store.

    Args:
        storage: Storage backend to populate

    Returns:
        True if data was loaded, False if the store already had categories
    """
    if await storage.list_categories():
        logger.debug("Sample data skipped - catalog not empty")
        return False

    category_ids: dict[str, int] = {}
    for data in SAMPLE_CATEGORIES:
        category = await storage.create_category(data)
        category_ids[category.name] = category.id

    for data in SAMPLE_PRODUCTS:
        values = {key: value for key, value in data.items() if key != "category"}
        values["category_id"] = category_ids[data["category"]]
        await storage.create_product(values)

    for data in SAMPLE_CUSTOMERS:
        await storage.create_customer(data)

    logger.info(
        "Sample data loaded",
        backend=storage.name,
        categories=len(SAMPLE_CATEGORIES),
        products=len(SAMPLE_PRODUCTS),
        customers=len(SAMPLE_CUSTOMERS),
    )
    return True
