"""Customer endpoints."""

from fastapi import APIRouter, HTTPException, Response, status

from storefront.api.deps import StorageBackend
from storefront.core.logging import get_logger
from storefront.schemas.customers import (
    CustomerCreateRequest,
    CustomerResponse,
    CustomerUpdateRequest,
)
from storefront.storage.base import ConflictError

logger = get_logger(__name__)

router = APIRouter(prefix="/customers", tags=["customers"])


def _not_found(customer_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Customer {customer_id} not found",
    )


@router.get("", response_model=list[CustomerResponse], summary="List customers")
async def list_customers(storage: StorageBackend) -> list[CustomerResponse]:
    customers = await storage.list_customers()
    return [CustomerResponse.model_validate(customer) for customer in customers]


@router.get("/{customer_id}", response_model=CustomerResponse, summary="Get customer")
async def get_customer(customer_id: int, storage: StorageBackend) -> CustomerResponse:
    customer = await storage.get_customer(customer_id)
    if customer is None:
        raise _not_found(customer_id)
    return CustomerResponse.model_validate(customer)


@router.post(
    "",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create customer",
)
async def create_customer(
    payload: CustomerCreateRequest, storage: StorageBackend
) -> CustomerResponse:
    try:
        customer = await storage.create_customer(payload.model_dump())
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    logger.info("Customer created", customer_id=customer.id)
    return CustomerResponse.model_validate(customer)


@router.put("/{customer_id}", response_model=CustomerResponse, summary="Update customer")
async def update_customer(
    customer_id: int, payload: CustomerUpdateRequest, storage: StorageBackend
) -> CustomerResponse:
    try:
        customer = await storage.update_customer(
            customer_id, payload.model_dump(exclude_unset=True)
        )
    except ConflictError as e:
        logger.warning("Customer update rejected", customer_id=customer_id, error=str(e))
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    if customer is None:
        raise _not_found(customer_id)
    return CustomerResponse.model_validate(customer)


@router.delete(
    "/{customer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete customer",
)
async def delete_customer(customer_id: int, storage: StorageBackend) -> Response:
    """Delete a customer; their orders are kept without a customer."""
    if not await storage.delete_customer(customer_id):
        raise _not_found(customer_id)

    logger.info("Customer deleted", customer_id=customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
