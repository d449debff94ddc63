"""Tenant-scoped repositories: the only data-access path for tenant-owned rows."""

from .base import TenantScopedRepository
from .customer import CustomerRepository
from .order import OrderRepository
from .product import ProductRepository

__all__ = [
    "TenantScopedRepository",
    "CustomerRepository",
    "OrderRepository",
    "ProductRepository",
]
