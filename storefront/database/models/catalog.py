"""
Catalog models for product categories and products.

Products carry the stock level that order creation decrements; the
non-negative stock invariant is enforced by a check constraint.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Integer,
    Numeric,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from storefront.database.base import BaseModel


class Category(BaseModel):
    """
    Product category.

    Attributes:
        id: Category identifier
        name: Display name
        description: Optional description
    """

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Category name",
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Category description",
    )

    __table_args__ = ({"comment": "Product categories"},)


class Product(BaseModel):
    """
    Sellable product with price and stock level.

    Attributes:
        id: Product identifier
        name: Display name
        description: Optional description
        sku: Unique stock keeping unit
        price: Current unit price
        image_url: Optional product image
        category_id: Optional category reference
        stock: Units on hand, never negative
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Product name",
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Product description",
    )

    sku: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        unique=True,
        comment="Unique stock keeping unit",
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=False,
        comment="Current unit price",
    )

    image_url: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Product image URL",
    )

    category_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("categories.id"),
        nullable=True,
        index=True,
        comment="Category reference",
    )

    stock: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        comment="Units on hand",
    )

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        {"comment": "Catalog products with stock levels"},
    )
