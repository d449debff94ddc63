"""API request and response schemas."""

from .catalog import (
    CustomerCreateRequest,
    CustomerResponse,
    CustomerUpdateRequest,
    ProductCreateRequest,
    ProductResponse,
    ProductUpdateRequest,
    RestockRequest,
)
from .errors import APIError, ErrorCode
from .health import (
    ComponentHealth,
    HealthDetailResponse,
    HealthResponse,
    HealthStatus,
    StoreDetails,
)
from .orders import (
    OrderCreateRequest,
    OrderItemRequest,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdateRequest,
    order_response_from_model,
)

__all__ = [
    "APIError",
    "ErrorCode",
    "ComponentHealth",
    "HealthDetailResponse",
    "HealthResponse",
    "HealthStatus",
    "StoreDetails",
    "CustomerCreateRequest",
    "CustomerResponse",
    "CustomerUpdateRequest",
    "ProductCreateRequest",
    "ProductResponse",
    "ProductUpdateRequest",
    "RestockRequest",
    "OrderCreateRequest",
    "OrderItemRequest",
    "OrderListResponse",
    "OrderResponse",
    "OrderStatusUpdateRequest",
    "order_response_from_model",
]
