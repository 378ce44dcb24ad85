"""
Database models package initialization.

This module exports all database models for SQLAlchemy and Alembic.
Models are imported here to ensure they are registered with the Base metadata
for migration generation and relationship resolution.
"""

from storefront.database.base import Base, BaseModel, IntegerIdMixin
from storefront.database.models.catalog import Category, Product
from storefront.database.models.customer import Customer
from storefront.database.models.order import Order, OrderItem

__all__ = [
    "Base",
    "BaseModel",
    "IntegerIdMixin",
    "Category",
    "Product",
    "Customer",
    "Order",
    "OrderItem",
]
