"""Error handling middleware for mapping exceptions to HTTP responses."""

from datetime import UTC, datetime
from typing import Callable
from uuid import UUID

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from poscore.api.schemas.errors import APIError, ErrorCode
from poscore.core.exceptions import (
    DuplicateSkuError,
    InsufficientStockError,
    InvalidInputError,
    InvalidTenantError,
    InvalidTransitionError,
    LockWaitTimeoutError,
    MissingTenantContextError,
    NotFoundError,
    OrderNumberExhaustedError,
    TenantMismatchError,
    UnresolvedTenantError,
)
from poscore.core.logging import get_logger, log_exception

logger = get_logger("poscore.api.errors")


def _message(exc: Exception) -> str:
    return str(exc.args[0]) if exc.args else str(exc)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware that catches exceptions and returns standardized error responses.

    Maps domain exceptions to appropriate HTTP status codes and formats
    all errors using the APIError schema.
    """

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request and handle any exceptions."""
        try:
            return await call_next(request)
        except Exception as exc:
            return self._handle_exception(request, exc)

    def _handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        """Convert exception to JSON error response."""
        request_id = get_request_id(request)
        status_code, error_code, message, details = self._map_exception(exc)

        if status_code >= 500:
            log_exception(logger, exc, request_id=request_id, path=request.url.path)

        return error_response(status_code, error_code, message, details, request_id)

    def _map_exception(
        self, exc: Exception
    ) -> tuple[int, str, str, dict | None]:
        """Map exception to (status_code, error_code, message, details)."""
        # Tenant boundary
        if isinstance(exc, UnresolvedTenantError):
            return (400, ErrorCode.TENANT_REQUIRED.value, _message(exc), None)

        if isinstance(exc, InvalidTenantError):
            # Never echo back whether the tenant exists
            return (403, ErrorCode.TENANT_INVALID.value, _message(exc), None)

        if isinstance(exc, TenantMismatchError):
            return (403, ErrorCode.TENANT_MISMATCH.value, "Entity belongs to another tenant", None)

        if isinstance(exc, MissingTenantContextError):
            return (
                500,
                ErrorCode.INTERNAL_ERROR.value,
                "Internal server error: tenant context not set",
                None,
            )

        # Lookups
        if isinstance(exc, NotFoundError):
            return (
                404,
                ErrorCode.NOT_FOUND.value,
                _message(exc),
                {"resource": exc.resource, "resource_id": str(exc.resource_id)},
            )

        # Business rule conflicts
        if isinstance(exc, InsufficientStockError):
            return (
                409,
                ErrorCode.INSUFFICIENT_STOCK.value,
                _message(exc),
                {
                    "product_id": str(exc.product_id),
                    "sku": exc.sku,
                    "available": exc.available,
                    "requested": exc.requested,
                },
            )

        if isinstance(exc, InvalidTransitionError):
            return (
                409,
                ErrorCode.INVALID_TRANSITION.value,
                _message(exc),
                {"current_status": exc.current, "requested_status": exc.requested},
            )

        if isinstance(exc, DuplicateSkuError):
            return (409, ErrorCode.DUPLICATE_SKU.value, _message(exc), {"sku": exc.sku})

        # Input errors
        if isinstance(exc, InvalidInputError):
            return (
                422,
                ErrorCode.INVALID_INPUT.value,
                _message(exc),
                {"field": exc.field} if exc.field else None,
            )

        if isinstance(exc, ValidationError):
            return (
                422,
                ErrorCode.VALIDATION_ERROR.value,
                "Request validation failed",
                {"errors": exc.errors(include_url=False, include_context=False)},
            )

        # Contention
        if isinstance(exc, (LockWaitTimeoutError, OrderNumberExhaustedError)):
            return (503, ErrorCode.SERVICE_UNAVAILABLE.value, _message(exc), None)

        # Generic exceptions
        return (
            500,
            ErrorCode.INTERNAL_ERROR.value,
            "Internal server error",
            {"type": type(exc).__name__} if self.debug else None,
        )


def get_request_id(request: Request) -> str:
    """Extract request ID from state or return placeholder."""
    rid = getattr(request.state, "request_id", None)
    if rid is None:
        return "unknown"
    return str(rid) if isinstance(rid, UUID) else rid


def error_response(
    status_code: int,
    error_code: str,
    message: str,
    details: dict | None,
    request_id: str,
) -> JSONResponse:
    error = APIError(
        error_code=error_code,
        message=message,
        details=details,
        request_id=request_id,
        timestamp=datetime.now(UTC),
    )
    return JSONResponse(
        status_code=status_code,
        content=error.model_dump(mode="json"),
        headers={"X-Request-ID": request_id},
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render FastAPI request validation failures in the APIError format."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return error_response(
        422,
        ErrorCode.VALIDATION_ERROR.value,
        "Request validation failed",
        {"errors": errors},
        get_request_id(request),
    )
