"""Product model: tenant-owned catalog entries with a stock quantity."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, Money, PortableUUID, TenantOwnedMixin, TimestampMixin, new_id


class Product(TenantOwnedMixin, TimestampMixin, Base):
    """A sellable product.

    SKUs are unique per tenant, not globally. Stock never goes negative:
    the inventory ledger decrements conditionally and the CHECK constraint
    backs it up at the database level.
    """

    __tablename__ = "products"
    __table_args__ = (
        UniqueConstraint("tenant_id", "sku", name="uq_products_tenant_sku"),
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("low_stock_threshold >= 0", name="ck_products_threshold_non_negative"),
    )

    product_id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sku: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    stock_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    low_stock_threshold: Mapped[int] = mapped_column(Integer, default=10, nullable=False)

    def has_stock(self, quantity: int) -> bool:
        return self.stock_quantity >= quantity

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.low_stock_threshold

    def __repr__(self) -> str:
        return f"<Product(id={self.product_id}, sku={self.sku}, stock={self.stock_quantity})>"
