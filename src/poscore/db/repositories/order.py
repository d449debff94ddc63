"""Order repository."""

from uuid import UUID

from sqlalchemy.orm import selectinload

from poscore.db.models.order import Order, OrderItem, OrderStatus
from poscore.db.repositories.base import TenantScopedRepository

# Everything an order response needs, loaded eagerly
ORDER_DETAIL_OPTIONS = (
    selectinload(Order.items).selectinload(OrderItem.product),
    selectinload(Order.customer),
)


class OrderRepository(TenantScopedRepository[Order]):
    """Repository for the tenant's orders.

    Order items carry no tenant column of their own; they are only ever
    loaded through an order returned by this repository.
    """

    model = Order

    async def get_with_details(self, order_id: UUID, *, refresh: bool = False) -> Order | None:
        """Get an order with its items, their products and the customer.

        Args:
            order_id: Order primary key
            refresh: Overwrite any state already held in the session

        Returns:
            Order or None if not found for this tenant
        """
        stmt = (
            self._scoped_select()
            .where(Order.order_id == order_id)
            .options(*ORDER_DETAIL_OPTIONS)
        )
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def lock_with_items(self, order_id: UUID) -> Order | None:
        """Lock an order row for the rest of the transaction and load its items."""
        return await self.get_for_update(order_id, options=ORDER_DETAIL_OPTIONS)

    async def list_orders(
        self,
        *,
        status: OrderStatus | None = None,
        customer_id: UUID | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Order]:
        """List the tenant's orders, newest first."""
        criteria = []
        if status is not None:
            criteria.append(Order.status == status)
        if customer_id is not None:
            criteria.append(Order.customer_id == customer_id)
        return await self.list(
            limit=limit,
            offset=offset,
            order_by="created_at",
            descending=True,
            criteria=criteria,
            options=ORDER_DETAIL_OPTIONS,
        )
