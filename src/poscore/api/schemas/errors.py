"""Error response schemas for API."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Tenant errors
    TENANT_REQUIRED = "tenant_required"
    TENANT_INVALID = "tenant_invalid"
    TENANT_MISMATCH = "tenant_mismatch"

    # Request errors
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    VALIDATION_ERROR = "validation_error"

    # Business rule conflicts
    INSUFFICIENT_STOCK = "insufficient_stock"
    INVALID_TRANSITION = "invalid_transition"
    DUPLICATE_SKU = "duplicate_sku"

    # System errors
    INTERNAL_ERROR = "internal_error"
    SERVICE_UNAVAILABLE = "service_unavailable"


class APIError(BaseModel):
    """Standardized API error response format.

    All API errors return this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(
        default=None, description="Additional error context"
    )
    request_id: str = Field(..., description="Request ID for tracing (UUIDv7)")
    timestamp: datetime = Field(..., description="When the error occurred")

    model_config = {"json_schema_extra": {"example": {
        "error_code": "insufficient_stock",
        "message": "Insufficient stock for product WIDGET-1. Available: 2, Requested: 3",
        "details": {
            "product_id": "019478f2-0000-7000-8000-000000000001",
            "sku": "WIDGET-1",
            "available": 2,
            "requested": 3,
        },
        "request_id": "019478f2-1234-7000-8000-abcdef123456",
        "timestamp": "2026-01-30T12:00:00Z",
    }}}
