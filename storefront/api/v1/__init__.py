"""
API version 1 router aggregation.
"""

from fastapi import APIRouter

from storefront.api.v1 import categories, customers, orders, products

api_router = APIRouter()

api_router.include_router(categories.router)
api_router.include_router(products.router)
api_router.include_router(customers.router)
api_router.include_router(orders.router)

__all__ = ["api_router"]
