"""Customer model."""

from uuid import UUID

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, PortableUUID, TenantOwnedMixin, TimestampMixin, new_id


class Customer(TenantOwnedMixin, TimestampMixin, Base):
    """A tenant's customer. Never shared across tenants."""

    __tablename__ = "customers"

    customer_id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Customer(id={self.customer_id}, name={self.name})>"
