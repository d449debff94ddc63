"""Core tenant context and exceptions."""

from poscore.core.context import TenantContext, create_context
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
    TenantError,
    TenantMismatchError,
    UnresolvedTenantError,
)

__all__ = [
    "TenantContext",
    "create_context",
    "DuplicateSkuError",
    "InsufficientStockError",
    "InvalidInputError",
    "InvalidTenantError",
    "InvalidTransitionError",
    "LockWaitTimeoutError",
    "MissingTenantContextError",
    "NotFoundError",
    "OrderNumberExhaustedError",
    "TenantError",
    "TenantMismatchError",
    "UnresolvedTenantError",
]
