"""Product repository."""

from sqlalchemy import select

from poscore.db.models.product import Product
from poscore.db.repositories.base import TenantScopedRepository


class ProductRepository(TenantScopedRepository[Product]):
    """Repository for the tenant's products."""

    model = Product

    async def get_by_sku(self, sku: str) -> Product | None:
        """Get a product by SKU within the tenant."""
        stmt = self._scoped_select().where(Product.sku == sku)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def sku_exists(self, sku: str, *, exclude_id=None) -> bool:
        """Check whether a SKU is taken within the tenant."""
        criteria = [Product.sku == sku]
        if exclude_id is not None:
            criteria.append(Product.product_id != exclude_id)
        return await self.count(*criteria) > 0

    async def list_low_stock(self, *, limit: int = 100, offset: int = 0) -> list[Product]:
        """List products at or below their low-stock threshold, lowest stock first."""
        stmt = (
            self._scoped_select()
            .where(Product.stock_quantity <= Product.low_stock_threshold)
            .order_by(Product.stock_quantity, Product.sku)
            .limit(min(limit, 1000))
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def current_stock(self, product_id) -> int | None:
        """Read the committed stock level of a product without loading the entity."""
        stmt = select(Product.stock_quantity).where(
            self._tenant_clause(), Product.product_id == product_id
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
