"""Catalog management: products and customers for one tenant."""

from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from poscore.config.settings import Settings, get_settings
from poscore.core.context import TenantContext
from poscore.core.exceptions import DuplicateSkuError, InvalidInputError, NotFoundError
from poscore.core.logging import get_logger
from poscore.db.models.base import CENTS
from poscore.db.models.customer import Customer
from poscore.db.models.product import Product
from poscore.db.repositories.customer import CustomerRepository
from poscore.db.repositories.product import ProductRepository
from poscore.db.transaction import read_scope, unit_of_work
from poscore.inventory.ledger import InventoryLedger

logger = get_logger(__name__)

PRODUCT_FIELDS = frozenset({"name", "sku", "description", "price", "low_stock_threshold"})
CUSTOMER_FIELDS = frozenset({"name", "email", "phone", "address"})


def _normalize_price(price: Decimal | str | int) -> Decimal:
    value = Decimal(str(price)).quantize(CENTS)
    if value < 0:
        raise InvalidInputError("Price cannot be negative", "price")
    return value


class CatalogService:
    """Product and customer management scoped to one tenant.

    Stock levels are not edited directly: new products are created with an
    opening quantity and later changes go through ``restock`` or the order
    engine, both of which use the inventory ledger's locks.
    """

    def __init__(self, db: AsyncSession, ctx: TenantContext, settings: Settings | None = None):
        self.db = db
        self.ctx = ctx
        self.settings = settings or get_settings()
        self.products = ProductRepository(db, ctx)
        self.customers = CustomerRepository(db, ctx)
        self.ledger = InventoryLedger(db, ctx)

    def _transaction(self):
        return unit_of_work(self.db, lock_timeout_ms=self.settings.LOCK_TIMEOUT_MS)

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    async def create_product(
        self,
        *,
        name: str,
        sku: str,
        price: Decimal | str | int,
        stock_quantity: int = 0,
        low_stock_threshold: int | None = None,
        description: str | None = None,
    ) -> Product:
        """Create a product.

        Raises:
            DuplicateSkuError: If the SKU already exists for this tenant
            InvalidInputError: Negative price or stock
        """
        if stock_quantity < 0:
            raise InvalidInputError("Stock quantity cannot be negative", "stock_quantity")
        if low_stock_threshold is None:
            low_stock_threshold = self.settings.DEFAULT_LOW_STOCK_THRESHOLD

        product = Product(
            name=name,
            sku=sku.strip(),
            description=description,
            price=_normalize_price(price),
            stock_quantity=stock_quantity,
            low_stock_threshold=low_stock_threshold,
        )

        try:
            async with self._transaction():
                if await self.products.sku_exists(product.sku):
                    raise DuplicateSkuError(product.sku)
                await self.products.create(product)
        except IntegrityError as exc:
            # Lost a race with a concurrent insert of the same SKU
            raise DuplicateSkuError(product.sku) from exc

        logger.info(
            "product_created",
            product_id=str(product.product_id),
            sku=product.sku,
            **self.ctx.to_log_dict(),
        )
        return product

    async def get_product(self, product_id: UUID) -> Product:
        async with read_scope(self.db):
            return await self.products.get_or_raise(product_id)

    async def find_product_by_sku(self, sku: str) -> Product:
        """Look up a product by its SKU within the tenant.

        Raises:
            NotFoundError: If no product of this tenant has the SKU
        """
        sku = sku.strip()
        async with read_scope(self.db):
            product = await self.products.get_by_sku(sku)
        if product is None:
            raise NotFoundError("Product", sku)
        return product

    async def list_products(self, *, limit: int = 100, offset: int = 0) -> list[Product]:
        async with read_scope(self.db):
            return await self.products.list(limit=limit, offset=offset, order_by="sku")

    async def low_stock_products(self, *, limit: int = 100, offset: int = 0) -> list[Product]:
        async with read_scope(self.db):
            return await self.ledger.low_stock(limit=limit, offset=offset)

    async def update_product(self, product_id: UUID, **changes: Any) -> Product:
        """Update product attributes.

        Price changes never touch existing order items, which keep the
        price snapshotted when they were ordered.

        Raises:
            NotFoundError: If the product does not exist for this tenant
            DuplicateSkuError: If the new SKU is taken within the tenant
            InvalidInputError: For unknown or read-only fields
        """
        unknown = set(changes) - PRODUCT_FIELDS
        if unknown:
            raise InvalidInputError(
                f"Cannot update field(s): {', '.join(sorted(unknown))}", sorted(unknown)[0]
            )
        if "price" in changes:
            changes["price"] = _normalize_price(changes["price"])
        if "sku" in changes:
            changes["sku"] = changes["sku"].strip()

        try:
            async with self._transaction():
                product = await self.products.get_for_update(product_id)
                if product is None:
                    raise NotFoundError("Product", product_id)
                if "sku" in changes and await self.products.sku_exists(
                    changes["sku"], exclude_id=product_id
                ):
                    raise DuplicateSkuError(changes["sku"])
                await self.products.update(product, changes)
                await self.db.refresh(product)
        except IntegrityError as exc:
            raise DuplicateSkuError(changes.get("sku", "")) from exc

        return product

    async def restock(self, product_id: UUID, quantity: int) -> Product:
        """Add units to a product's stock under the product lock.

        Raises:
            NotFoundError: If the product does not exist for this tenant
            InvalidInputError: If quantity is not positive
        """
        async with self._transaction():
            new_level = await self.ledger.increment(product_id, quantity)
            if new_level is None:
                raise NotFoundError("Product", product_id)
            product = await self.products.get_for_update(product_id)

        logger.info(
            "product_restocked",
            product_id=str(product_id),
            quantity=quantity,
            stock=new_level,
            **self.ctx.to_log_dict(),
        )
        return product

    async def delete_product(self, product_id: UUID) -> None:
        """Delete a product.

        Order items that referenced it keep their snapshot and lose the link.

        Raises:
            NotFoundError: If the product does not exist for this tenant
        """
        async with self._transaction():
            product = await self.products.get_for_update(product_id)
            if product is None:
                raise NotFoundError("Product", product_id)
            await self.products.delete(product)

        logger.info("product_deleted", product_id=str(product_id), **self.ctx.to_log_dict())

    # -------------------------------------------------------------------------
    # Customers
    # -------------------------------------------------------------------------

    async def create_customer(
        self,
        *,
        name: str,
        email: str | None = None,
        phone: str | None = None,
        address: str | None = None,
    ) -> Customer:
        customer = Customer(
            name=name,
            email=email.lower() if email else None,
            phone=phone,
            address=address,
        )
        async with self._transaction():
            await self.customers.create(customer)

        logger.info(
            "customer_created",
            customer_id=str(customer.customer_id),
            **self.ctx.to_log_dict(),
        )
        return customer

    async def get_customer(self, customer_id: UUID) -> Customer:
        async with read_scope(self.db):
            return await self.customers.get_or_raise(customer_id)

    async def find_customers_by_email(self, email: str) -> list[Customer]:
        """Customers of this tenant registered with the email (case-insensitive)."""
        async with read_scope(self.db):
            return await self.customers.find_by_email(email.strip())

    async def list_customers(self, *, limit: int = 100, offset: int = 0) -> list[Customer]:
        async with read_scope(self.db):
            return await self.customers.list(limit=limit, offset=offset, order_by="name")

    async def update_customer(self, customer_id: UUID, **changes: Any) -> Customer:
        """Update customer contact details.

        Raises:
            NotFoundError: If the customer does not exist for this tenant
            InvalidInputError: For unknown fields
        """
        unknown = set(changes) - CUSTOMER_FIELDS
        if unknown:
            raise InvalidInputError(
                f"Cannot update field(s): {', '.join(sorted(unknown))}", sorted(unknown)[0]
            )
        if changes.get("email"):
            changes["email"] = changes["email"].lower()

        async with self._transaction():
            customer = await self.customers.get_or_raise(customer_id)
            await self.customers.update(customer, changes)
        return customer
