"""Tenant model for multi-tenancy support."""

from uuid import UUID

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, PortableUUID, TimestampMixin, new_id


class Tenant(TimestampMixin, Base):
    """Tenant (business) in the system.

    Each tenant represents a business using the point-of-sale backend.
    All catalog, customer and order data is isolated by tenant_id.
    Tenants are never deleted, only deactivated.
    """

    __tablename__ = "tenants"

    tenant_id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    # Status
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Tenant(id={self.tenant_id}, name={self.name})>"
