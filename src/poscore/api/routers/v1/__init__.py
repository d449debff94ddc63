"""API v1 routers."""

from fastapi import APIRouter

from .customers import router as customers_router
from .orders import router as orders_router
from .products import router as products_router

# Every v1 endpoint is tenant-scoped through the X-Tenant-ID header
router = APIRouter(prefix="/v1")

router.include_router(orders_router)
router.include_router(products_router)
router.include_router(customers_router)

__all__ = ["router", "orders_router", "products_router", "customers_router"]
