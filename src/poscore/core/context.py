"""Tenant context for isolated multi-tenant operations.

A TenantContext is created once per inbound operation after the tenant has
been resolved, and is passed explicitly to every repository and service that
touches tenant-owned data. It is frozen: an operation can never re-scope
itself to another tenant, and no process-wide "current tenant" exists.

Usage:
    from poscore.core.context import create_context

    ctx = create_context(tenant_id=tenant.tenant_id)

    service = OrderService(db, ctx)
    order = await service.create_order(customer_id, lines)
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from uuid_utils.compat import uuid7


class TenantContext(BaseModel):
    """Resolved tenant identity for a single operation."""

    model_config = ConfigDict(frozen=True)

    tenant_id: UUID
    request_id: UUID = Field(default_factory=uuid7)
    resolved_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def owns(self, tenant_id: UUID | None) -> bool:
        """Return True if a row stamped with ``tenant_id`` belongs to this context."""
        return tenant_id is not None and tenant_id == self.tenant_id

    def to_log_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for structured logging."""
        return {
            "tenant_id": str(self.tenant_id),
            "request_id": str(self.request_id),
        }


def create_context(*, tenant_id: UUID, request_id: UUID | None = None) -> TenantContext:
    """Factory function to create a TenantContext.

    Args:
        tenant_id: The resolved tenant identifier
        request_id: Optional request id to correlate with (generated if omitted)

    Returns:
        A new TenantContext instance
    """
    if request_id is None:
        return TenantContext(tenant_id=tenant_id)
    return TenantContext(tenant_id=tenant_id, request_id=request_id)
