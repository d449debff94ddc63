"""Order and order item models."""

from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import CheckConstraint, Enum as SAEnum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, Money, PortableUUID, TenantOwnedMixin, TimestampMixin, new_id
from .customer import Customer
from .product import Product


class OrderStatus(str, Enum):
    """Lifecycle status of an order."""

    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


class Order(TenantOwnedMixin, TimestampMixin, Base):
    """A customer order.

    Created in ``pending`` status with a zero total; the total is filled in
    within the same unit of work as its items. Orders are never deleted.
    """

    __tablename__ = "orders"
    __table_args__ = (
        Index("idx_orders_tenant_status", "tenant_id", "status"),
        Index("idx_orders_tenant_created", "tenant_id", "created_at"),
    )

    order_id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True, default=new_id)
    customer_id: Mapped[UUID] = mapped_column(
        PortableUUID(), ForeignKey("customers.customer_id"), nullable=False, index=True
    )
    order_number: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    status: Mapped[OrderStatus] = mapped_column(
        SAEnum(
            OrderStatus,
            name="order_status",
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=OrderStatus.PENDING,
        nullable=False,
    )
    total_amount: Mapped[Decimal] = mapped_column(Money, default=Decimal("0.00"), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    customer: Mapped[Customer] = relationship()
    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        order_by="OrderItem.line_number",
        cascade="all, delete-orphan",
    )

    def is_pending(self) -> bool:
        return self.status == OrderStatus.PENDING

    def is_paid(self) -> bool:
        return self.status == OrderStatus.PAID

    def is_cancelled(self) -> bool:
        return self.status == OrderStatus.CANCELLED

    def can_be_cancelled(self) -> bool:
        """Pending and paid orders can be cancelled; cancellation is terminal."""
        return self.is_pending() or self.is_paid()

    def __repr__(self) -> str:
        return f"<Order(id={self.order_id}, number={self.order_number}, status={self.status})>"


class OrderItem(TimestampMixin, Base):
    """A line of an order.

    The unit price is a snapshot taken when the order was placed and is
    never updated afterwards. Items inherit tenant ownership from their
    order and are only reachable through it.
    """

    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )

    item_id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True, default=new_id)
    order_id: Mapped[UUID] = mapped_column(
        PortableUUID(),
        ForeignKey("orders.order_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[UUID | None] = mapped_column(
        PortableUUID(), ForeignKey("products.product_id", ondelete="SET NULL"), nullable=True
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Money, nullable=False)

    order: Mapped[Order] = relationship(back_populates="items")
    product: Mapped[Product | None] = relationship()

    def __repr__(self) -> str:
        return f"<OrderItem(order={self.order_id}, product={self.product_id}, qty={self.quantity})>"
