"""
Order endpoints.

Order creation persists the order, its line items and the resulting stock
levels in one transaction. It is rate limited per client address.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request, status

from storefront.api.deps import OrderServiceDep, limiter
from storefront.core.config import get_settings
from storefront.core.logging import get_logger
from storefront.schemas.orders import (
    OrderCreateRequest,
    OrderResponse,
    OrderStatusUpdate,
    OrderSummaryResponse,
)
from storefront.services.orders.service import (
    OrderCreationError,
    OrderNotFoundError,
    OrderValidationError,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


def _order_rate_limit() -> str:
    return get_settings().order_rate_limit


@router.get("", response_model=list[OrderSummaryResponse], summary="List orders")
async def list_orders(
    order_service: OrderServiceDep,
    customer_id: Optional[int] = Query(None, alias="customerId", description="Filter by customer"),
) -> list[OrderSummaryResponse]:
    """List order headers, newest first."""
    orders = await order_service.list_orders(customer_id=customer_id)
    return [OrderSummaryResponse.model_validate(order) for order in orders]


@router.get("/{order_id}", response_model=OrderResponse, summary="Get order")
async def get_order(order_id: int, order_service: OrderServiceDep) -> OrderResponse:
    try:
        order = await order_service.get_order(order_id)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return OrderResponse.model_validate(order)


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create order",
    description="Create an order with its line items and decrement product stock atomically",
)
@limiter.limit(_order_rate_limit)
async def create_order(
    request: Request,
    payload: OrderCreateRequest,
    order_service: OrderServiceDep,
) -> OrderResponse:
    """
    Create an order.

    Args:
        request: Incoming request, used for rate limiting
        payload: Order header and line items
        order_service: Order service

    Returns:
        OrderResponse: Persisted order with its items

    Raises:
        HTTPException: 400 if the order is invalid, 500 if it was not persisted
    """
    try:
        order = await order_service.create_order(
            payload.order.to_header(),
            [item.to_line() for item in payload.items],
        )

    except OrderValidationError as e:
        logger.warning(
            "Order validation failed",
            error=str(e),
            context=e.context,
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    except OrderCreationError as e:
        logger.error(
            "Order creation failed",
            error=str(e),
            context=e.context,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create order",
        ) from e

    return OrderResponse.model_validate(order)


@router.put("/{order_id}/status", response_model=OrderResponse, summary="Update order status")
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    order_service: OrderServiceDep,
) -> OrderResponse:
    try:
        order = await order_service.update_order_status(order_id, payload.status)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return OrderResponse.model_validate(order)
