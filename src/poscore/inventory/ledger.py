"""Inventory ledger: per-product stock with atomic increment and decrement.

All methods must run inside the caller's unit of work. ``lock`` takes an
exclusive row lock on the product that is held until that unit of work
commits or rolls back, so two orders contending for the same product
serialize. The decrement itself is a conditional UPDATE that re-checks
sufficiency at the moment it executes, so stock cannot go negative even on
backends without row locks.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from poscore.core.context import TenantContext
from poscore.core.exceptions import InsufficientStockError, InvalidInputError, NotFoundError
from poscore.core.logging import get_logger
from poscore.db.models.product import Product
from poscore.db.repositories.product import ProductRepository

logger = get_logger(__name__)


def _require_positive(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidInputError(
            f"Quantity must be a positive integer, got {quantity!r}", "quantity"
        )


class InventoryLedger:
    """Stock operations for one tenant's products."""

    def __init__(self, db: AsyncSession, ctx: TenantContext):
        self.db = db
        self.ctx = ctx
        self.products = ProductRepository(db, ctx)

    async def lock(self, product_id: UUID) -> Product:
        """Lock a product row for the rest of the unit of work.

        Raises:
            NotFoundError: If the product does not exist for this tenant
        """
        product = await self.products.get_for_update(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    async def has_sufficient_stock(self, product_id: UUID, quantity: int) -> bool:
        """Check stock against the locked row.

        Acquires (or re-reads under) the same exclusive lock used by
        ``decrement``, never a separate unlocked read.
        """
        _require_positive(quantity)
        product = await self.lock(product_id)
        return product.has_stock(quantity)

    async def decrement(self, product_id: UUID, quantity: int) -> int:
        """Remove ``quantity`` units from stock.

        Returns:
            Stock remaining after the decrement

        Raises:
            InsufficientStockError: If stock is below ``quantity`` when the update runs
            NotFoundError: If the product does not exist for this tenant
        """
        _require_positive(quantity)
        remaining = await self.products.conditional_update(
            product_id,
            {"stock_quantity": Product.stock_quantity - quantity},
            Product.stock_quantity >= quantity,
            returning=Product.stock_quantity,
        )
        if remaining is None:
            available = await self.products.current_stock(product_id)
            if available is None:
                raise NotFoundError("Product", product_id)
            raise InsufficientStockError(product_id, requested=quantity, available=available)

        logger.debug(
            "stock_decremented",
            product_id=str(product_id),
            quantity=quantity,
            remaining=remaining,
            **self.ctx.to_log_dict(),
        )
        return remaining

    async def increment(self, product_id: UUID, quantity: int) -> int | None:
        """Return ``quantity`` units to stock.

        Used for cancellation compensation and restocking. A product that no
        longer exists cannot be compensated; that is not an error.

        Returns:
            Stock after the increment, or None if the product is gone
        """
        _require_positive(quantity)
        product = await self.products.get_for_update(product_id)
        if product is None:
            logger.info(
                "stock_release_skipped",
                product_id=str(product_id),
                quantity=quantity,
                reason="product_missing",
                **self.ctx.to_log_dict(),
            )
            return None

        new_level = await self.products.conditional_update(
            product_id,
            {"stock_quantity": Product.stock_quantity + quantity},
            returning=Product.stock_quantity,
        )
        logger.debug(
            "stock_released",
            product_id=str(product_id),
            quantity=quantity,
            stock=new_level,
            **self.ctx.to_log_dict(),
        )
        return new_level

    async def low_stock(self, *, limit: int = 100, offset: int = 0) -> list[Product]:
        """Products at or below their low-stock threshold."""
        return await self.products.list_low_stock(limit=limit, offset=offset)
