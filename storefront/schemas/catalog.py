"""Category and product schemas."""

from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from storefront.schemas.common import CamelModel, CamelResponse


class CategoryRequest(CamelModel):
    """Request schema for creating or replacing a category."""

    name: str = Field(..., min_length=1, max_length=255, description="Category name")
    description: Optional[str] = Field(None, description="Category description")


class CategoryResponse(CamelResponse):
    id: int
    name: str
    description: Optional[str] = None


class ProductCreateRequest(CamelModel):
    """Request schema for creating a product."""

    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    sku: str = Field(..., min_length=1, max_length=64, description="Stock keeping unit")
    price: Decimal = Field(..., ge=0, decimal_places=2, description="Unit price")
    image_url: Optional[str] = Field(None, description="Product image URL")
    category_id: Optional[int] = Field(None, description="Category ID")
    stock: int = Field(default=0, ge=0, description="Units in stock")


class ProductUpdateRequest(CamelModel):
    """Partial product update; omitted fields keep their current value."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    sku: Optional[str] = Field(None, min_length=1, max_length=64)
    price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    stock: Optional[int] = Field(None, ge=0)

    @field_validator("name", "sku", "price", "stock")
    @classmethod
    def reject_null(cls, v):
        """Required columns may be omitted but not cleared."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class StockAdjustRequest(CamelModel):
    """Signed stock delta; the resulting stock is clamped at zero."""

    quantity: int = Field(..., description="Units to add (positive) or remove (negative)")


class ProductResponse(CamelResponse):
    id: int
    name: str
    description: Optional[str] = None
    sku: str
    price: Decimal
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    stock: int
