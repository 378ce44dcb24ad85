"""Category endpoints."""

from fastapi import APIRouter, HTTPException, Response, status

from storefront.api.deps import StorageBackend
from storefront.core.logging import get_logger
from storefront.schemas.catalog import CategoryRequest, CategoryResponse
from storefront.storage.base import ConflictError

logger = get_logger(__name__)

router = APIRouter(prefix="/categories", tags=["categories"])


def _not_found(category_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Category {category_id} not found",
    )


@router.get("", response_model=list[CategoryResponse], summary="List categories")
async def list_categories(storage: StorageBackend) -> list[CategoryResponse]:
    categories = await storage.list_categories()
    return [CategoryResponse.model_validate(category) for category in categories]


@router.get("/{category_id}", response_model=CategoryResponse, summary="Get category")
async def get_category(category_id: int, storage: StorageBackend) -> CategoryResponse:
    category = await storage.get_category(category_id)
    if category is None:
        raise _not_found(category_id)
    return CategoryResponse.model_validate(category)


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
)
async def create_category(
    payload: CategoryRequest, storage: StorageBackend
) -> CategoryResponse:
    try:
        category = await storage.create_category(payload.model_dump())
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    logger.info("Category created", category_id=category.id, name=category.name)
    return CategoryResponse.model_validate(category)


@router.put("/{category_id}", response_model=CategoryResponse, summary="Replace category")
async def update_category(
    category_id: int, payload: CategoryRequest, storage: StorageBackend
) -> CategoryResponse:
    try:
        category = await storage.update_category(category_id, payload.model_dump())
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    if category is None:
        raise _not_found(category_id)
    return CategoryResponse.model_validate(category)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete category",
)
async def delete_category(category_id: int, storage: StorageBackend) -> Response:
    """
    Delete a category.

    Raises:
        HTTPException: 404 if missing, 409 if products still reference it
    """
    try:
        deleted = await storage.delete_category(category_id)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    if not deleted:
        raise _not_found(category_id)

    logger.info("Category deleted", category_id=category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
