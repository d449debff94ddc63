"""Core exceptions for tenant isolation, inventory and order processing."""

from uuid import UUID

from poscore.utils.exceptions import PosCoreError


# =============================================================================
# Tenant isolation boundary
# =============================================================================


class TenantError(PosCoreError):
    """Base class for tenant isolation failures."""

    pass


class UnresolvedTenantError(TenantError):
    """Raised when no tenant identifier was supplied with the operation."""

    def __init__(self, message: str = "X-Tenant-ID header is required"):
        super().__init__(message)

    def __str__(self) -> str:
        return f"UnresolvedTenantError: {self.args[0]}"


class InvalidTenantError(TenantError):
    """Raised when the supplied tenant identifier does not name an active tenant.

    Malformed identifiers, unknown tenants and deactivated tenants are all
    reported through this error so callers cannot probe which tenants exist.

    Attributes:
        tenant_ref: The identifier as supplied by the caller
        reason: Internal reason ("malformed", "not_found" or "inactive"), for logs only
    """

    def __init__(self, tenant_ref: UUID | str, reason: str = "not_found"):
        super().__init__("Invalid or inactive tenant")
        self.tenant_ref = tenant_ref
        self.reason = reason

    def __str__(self) -> str:
        return f"InvalidTenantError: {self.args[0]}"


class MissingTenantContextError(TenantError):
    """Raised when a tenant-owned row would be written without an owning tenant.

    This is a programming error: tenant-owned entities must be created through
    a repository bound to a TenantContext, or carry an explicit tenant id.
    """

    def __init__(self, entity: str):
        super().__init__(f"{entity} created without an active tenant context")
        self.entity = entity


class TenantMismatchError(TenantError):
    """Raised when an entity is written under a context of another tenant.

    Attributes:
        entity: Entity type name
        tenant_id: Tenant of the active context
    """

    def __init__(self, entity: str, tenant_id: UUID):
        super().__init__(f"{entity} does not belong to tenant {tenant_id}")
        self.entity = entity
        self.tenant_id = tenant_id


# =============================================================================
# Data access
# =============================================================================


class NotFoundError(PosCoreError):
    """Raised when an entity is absent or owned by another tenant.

    The two cases are deliberately indistinguishable.

    Attributes:
        resource: Entity type name (e.g., "Product")
        resource_id: The identifier that was looked up
    """

    def __init__(self, resource: str, resource_id: UUID | str):
        super().__init__(f"{resource} not found: {resource_id}")
        self.resource = resource
        self.resource_id = resource_id

    def __str__(self) -> str:
        return f"NotFoundError: {self.args[0]}"


class InvalidInputError(PosCoreError):
    """Raised for malformed requests (empty item lists, non-positive quantities).

    Attributes:
        field: Name of the offending field, if known
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class DuplicateSkuError(PosCoreError):
    """Raised when a SKU already exists within the tenant."""

    def __init__(self, sku: str):
        super().__init__(f"SKU already exists: {sku}")
        self.sku = sku


# =============================================================================
# Inventory and orders
# =============================================================================


class InsufficientStockError(PosCoreError):
    """Raised when a product cannot cover the requested quantity.

    Attributes:
        product_id: The product that ran short
        sku: The product SKU (None if the product could not be read)
        available: Stock on hand when the decrement was attempted
        requested: Quantity requested
    """

    def __init__(
        self,
        product_id: UUID,
        requested: int,
        available: int | None = None,
        sku: str | None = None,
    ):
        label = sku or str(product_id)
        super().__init__(
            f"Insufficient stock for product {label}. "
            f"Available: {available if available is not None else 'unknown'}, "
            f"Requested: {requested}"
        )
        self.product_id = product_id
        self.sku = sku
        self.available = available
        self.requested = requested


class InvalidTransitionError(PosCoreError):
    """Raised when an order status change is not allowed.

    Attributes:
        current: Current status value
        requested: Requested status value
    """

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot update order status from {current} to {requested}")
        self.current = current
        self.requested = requested


class OrderNumberExhaustedError(PosCoreError):
    """Raised when no unique order number could be allocated."""

    def __init__(self, attempts: int):
        super().__init__(f"Could not allocate a unique order number after {attempts} attempts")
        self.attempts = attempts


class LockWaitTimeoutError(PosCoreError):
    """Raised when a unit of work gave up waiting for a row or database lock."""

    def __init__(self, message: str = "Timed out waiting for a lock"):
        super().__init__(message)
