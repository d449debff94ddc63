"""Base models for SQLAlchemy."""

from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Numeric, String, event, func
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, declared_attr, mapped_column
from sqlalchemy.types import TypeDecorator
from uuid_utils.compat import uuid7

from poscore.core.exceptions import MissingTenantContextError

# Money columns: fixed point, two decimal places
Money = Numeric(12, 2, asdecimal=True)
CENTS = Decimal("0.01")


def new_id() -> UUID:
    """Generate a time-ordered primary key."""
    return uuid7()


def utcnow() -> datetime:
    return datetime.now(UTC)


class PortableUUID(TypeDecorator):
    """UUID type that uses native UUID on PostgreSQL and String elsewhere."""

    impl = String(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PGUUID(as_uuid=True))
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if dialect.name == "postgresql":
            return value
        return str(value) if isinstance(value, UUID) else value

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if isinstance(value, UUID):
            return value
        return UUID(value) if value else None


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class TimestampMixin:
    """Mixin for created_at/updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )


class TenantOwnedMixin:
    """Mixin for rows that belong to exactly one tenant.

    Models using this mixin must only be read and written through a
    TenantScopedRepository. The owning reference is non-nullable and is
    never reassigned after creation.
    """

    @declared_attr
    def tenant_id(cls) -> Mapped[UUID]:
        return mapped_column(
            PortableUUID(),
            ForeignKey("tenants.tenant_id"),
            nullable=False,
            index=True,
        )


@event.listens_for(Session, "before_flush")
def _reject_unowned_rows(session: Session, flush_context, instances) -> None:
    """Refuse to persist tenant-owned rows that carry no tenant id."""
    for obj in session.new:
        if isinstance(obj, TenantOwnedMixin) and obj.tenant_id is None:
            raise MissingTenantContextError(type(obj).__name__)
