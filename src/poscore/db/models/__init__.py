"""Database models for poscore."""

from .base import Base, TenantOwnedMixin, TimestampMixin
from .customer import Customer
from .order import Order, OrderItem, OrderStatus
from .product import Product
from .tenant import Tenant

__all__ = [
    "Base",
    "TenantOwnedMixin",
    "TimestampMixin",
    "Customer",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Product",
    "Tenant",
]
