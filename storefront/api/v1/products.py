"""
Product catalog endpoints.

Besides CRUD, products expose a low-stock listing and a manual stock
adjustment that adds a signed delta and clamps the result at zero.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Response, status

from storefront.api.deps import AppSettings, StorageBackend
from storefront.core.logging import get_logger
from storefront.schemas.catalog import (
    ProductCreateRequest,
    ProductResponse,
    ProductUpdateRequest,
    StockAdjustRequest,
)
from storefront.storage.base import ConflictError

logger = get_logger(__name__)

router = APIRouter(prefix="/products", tags=["products"])


def _not_found(product_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Product {product_id} not found",
    )


@router.get("", response_model=list[ProductResponse], summary="List products")
async def list_products(
    storage: StorageBackend,
    category_id: Optional[int] = Query(None, alias="categoryId", description="Filter by category"),
) -> list[ProductResponse]:
    products = await storage.list_products(category_id=category_id)
    return [ProductResponse.model_validate(product) for product in products]


@router.get(
    "/low-stock",
    response_model=list[ProductResponse],
    summary="List products low on stock",
)
async def list_low_stock_products(
    storage: StorageBackend,
    settings: AppSettings,
    threshold: Optional[int] = Query(None, ge=0, description="Stock level at or below which a product is listed"),
) -> list[ProductResponse]:
    if threshold is None:
        threshold = settings.low_stock_threshold
    products = await storage.list_low_stock_products(threshold)
    return [ProductResponse.model_validate(product) for product in products]


@router.get("/{product_id}", response_model=ProductResponse, summary="Get product")
async def get_product(product_id: int, storage: StorageBackend) -> ProductResponse:
    product = await storage.get_product(product_id)
    if product is None:
        raise _not_found(product_id)
    return ProductResponse.model_validate(product)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create product",
)
async def create_product(
    payload: ProductCreateRequest, storage: StorageBackend
) -> ProductResponse:
    """
    Create a product.

    Raises:
        HTTPException: 409 if the SKU exists or the category does not
    """
    try:
        product = await storage.create_product(payload.model_dump())
    except ConflictError as e:
        logger.warning("Product creation rejected", sku=payload.sku, error=str(e))
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    logger.info("Product created", product_id=product.id, sku=product.sku)
    return ProductResponse.model_validate(product)


@router.put("/{product_id}", response_model=ProductResponse, summary="Update product")
async def update_product(
    product_id: int, payload: ProductUpdateRequest, storage: StorageBackend
) -> ProductResponse:
    try:
        product = await storage.update_product(
            product_id, payload.model_dump(exclude_unset=True)
        )
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    if product is None:
        raise _not_found(product_id)
    return ProductResponse.model_validate(product)


@router.put(
    "/{product_id}/stock",
    response_model=ProductResponse,
    summary="Adjust product stock",
)
async def adjust_product_stock(
    product_id: int, payload: StockAdjustRequest, storage: StorageBackend
) -> ProductResponse:
    product = await storage.adjust_product_stock(product_id, payload.quantity)
    if product is None:
        raise _not_found(product_id)

    logger.info(
        "Product stock adjusted",
        product_id=product_id,
        delta=payload.quantity,
        stock=product.stock,
    )
    return ProductResponse.model_validate(product)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete product",
)
async def delete_product(product_id: int, storage: StorageBackend) -> Response:
    try:
        deleted = await storage.delete_product(product_id)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    if not deleted:
        raise _not_found(product_id)

    logger.info("Product deleted", product_id=product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
