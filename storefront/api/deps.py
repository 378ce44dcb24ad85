"""
FastAPI dependencies for storage, settings and services.

The storage backend is created by the application lifespan and kept on
``app.state``; request handlers reach it through these dependencies.
"""

from typing import Annotated

from fastapi import Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from storefront.core.config import Settings, get_settings
from storefront.services.orders.service import OrderService
from storefront.storage.base import Storage

limiter = Limiter(key_func=get_remote_address)


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_storage(request: Request) -> Storage:
    """Storage backend attached to the running application."""
    return request.app.state.storage


AppSettings = Annotated[Settings, Depends(get_app_settings)]
StorageBackend = Annotated[Storage, Depends(get_storage)]


def get_order_service(storage: StorageBackend, settings: AppSettings) -> OrderService:
    return OrderService(storage, settings)


OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
