"""
Order schemas for API request/response validation.

Order creation takes the header and its line items as two sibling objects,
``{"order": {...}, "items": [...]}``. An empty item list passes schema
validation and is rejected by the order service.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from storefront.schemas.common import CamelModel, CamelResponse
from storefront.services.orders.enums import OrderStatus
from storefront.storage.base import OrderHeader, OrderLine


class OrderHeaderRequest(CamelModel):
    """Order header fields supplied by the caller."""

    customer_id: Optional[int] = Field(None, description="Customer placing the order")
    status: OrderStatus = Field(
        default=OrderStatus.PENDING,
        description="Initial order status",
    )
    total: Optional[Decimal] = Field(
        None,
        ge=0,
        decimal_places=2,
        description="Order total; computed from the items when omitted",
    )

    def to_header(self) -> OrderHeader:
        return OrderHeader(
            customer_id=self.customer_id,
            status=self.status,
            total=self.total,
        )


class OrderItemRequest(CamelModel):
    """Order line item."""

    product_id: int = Field(..., description="Product ID")
    quantity: int = Field(..., ge=1, description="Units ordered")
    unit_price: Decimal = Field(..., ge=0, decimal_places=2, description="Unit price")

    def to_line(self) -> OrderLine:
        return OrderLine(
            product_id=self.product_id,
            quantity=self.quantity,
            unit_price=self.unit_price,
        )


class OrderCreateRequest(CamelModel):
    """Request schema for creating a new order."""

    order: OrderHeaderRequest = Field(
        default_factory=OrderHeaderRequest,
        description="Order header",
    )
    items: list[OrderItemRequest] = Field(..., description="Order line items")


class OrderStatusUpdate(CamelModel):
    """Request schema for updating order status."""

    status: OrderStatus = Field(..., description="New order status")


class OrderItemResponse(CamelResponse):
    id: int
    order_id: int
    product_id: int
    quantity: int
    unit_price: Decimal


class OrderSummaryResponse(CamelResponse):
    """Order header without line items."""

    id: int
    customer_id: Optional[int] = None
    order_date: datetime
    status: OrderStatus
    total: Decimal


class OrderResponse(OrderSummaryResponse):
    """Order header with its line items."""

    items: list[OrderItemResponse] = Field(default_factory=list)
