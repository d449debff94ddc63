"""Order transaction engine.

OrderService is the only writer of orders, order items and stock. Each of
``create_order``, ``cancel_order`` and ``update_status`` runs as one unit of
work: either every row it touches is committed, or none is.

Usage:
    service = OrderService(db, ctx)
    order = await service.create_order(
        customer_id,
        [OrderLine(product_id=p1, quantity=3), OrderLine(product_id=p2, quantity=1)],
    )
    order = await service.update_status(order.order_id, OrderStatus.PAID)
    order = await service.cancel_order(order.order_id)
"""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from poscore.config.settings import Settings, get_settings
from poscore.core.context import TenantContext
from poscore.core.exceptions import (
    InsufficientStockError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
    OrderNumberExhaustedError,
)
from poscore.core.logging import get_logger
from poscore.db.models.base import CENTS
from poscore.db.models.customer import Customer
from poscore.db.models.order import Order, OrderItem, OrderStatus
from poscore.db.repositories.customer import CustomerRepository
from poscore.db.repositories.order import OrderRepository
from poscore.db.transaction import read_scope, unit_of_work
from poscore.inventory.ledger import InventoryLedger
from poscore.orders.numbering import generate_order_number
from poscore.orders.state_machine import assert_transition

logger = get_logger(__name__)


@dataclass(frozen=True)
class OrderLine:
    """One requested line of a new order."""

    product_id: UUID
    quantity: int


class OrderService:
    """Creates, cancels and transitions orders for one tenant."""

    def __init__(
        self,
        db: AsyncSession,
        ctx: TenantContext,
        settings: Settings | None = None,
    ):
        """Initialize the service for a single operation.

        Args:
            db: Session owned by this operation
            ctx: Resolved tenant context
            settings: Optional settings override
        """
        self.db = db
        self.ctx = ctx
        self.settings = settings or get_settings()
        self.orders = OrderRepository(db, ctx)
        self.customers = CustomerRepository(db, ctx)
        self.ledger = InventoryLedger(db, ctx)

    def _transaction(self):
        return unit_of_work(self.db, lock_timeout_ms=self.settings.LOCK_TIMEOUT_MS)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_order(self, order_id: UUID) -> Order:
        """Get an order with items and customer.

        Raises:
            NotFoundError: If the order does not exist for this tenant
        """
        async with read_scope(self.db):
            order = await self.orders.get_with_details(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    async def list_orders(
        self,
        *,
        status: OrderStatus | None = None,
        customer_id: UUID | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Order]:
        """List the tenant's orders, newest first."""
        async with read_scope(self.db):
            return await self.orders.list_orders(
                status=status, customer_id=customer_id, limit=limit, offset=offset
            )

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    def _validate_lines(self, lines: Sequence[OrderLine]) -> None:
        if not lines:
            raise InvalidInputError("Order must contain at least one item", "items")
        if len(lines) > self.settings.MAX_ORDER_LINES:
            raise InvalidInputError(
                f"Order cannot contain more than {self.settings.MAX_ORDER_LINES} items", "items"
            )
        for line in lines:
            qty = line.quantity
            if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
                raise InvalidInputError(
                    f"Quantity must be a positive integer, got {qty!r}", "quantity"
                )

    async def create_order(
        self,
        customer_id: UUID,
        lines: Sequence[OrderLine],
        *,
        notes: str | None = None,
    ) -> Order:
        """Create an order and reserve its stock atomically.

        Lines are processed in the order supplied. Each product is locked,
        checked and decremented in turn; if any line cannot be satisfied the
        whole order is rolled back, including stock already taken for
        earlier lines.

        Args:
            customer_id: Customer placing the order (must belong to the tenant)
            lines: Requested products and quantities
            notes: Optional free-text note

        Returns:
            The created order with items, products and customer loaded

        Raises:
            InvalidInputError: Empty item list or non-positive quantity
            NotFoundError: Unknown customer or product (or one owned by another tenant)
            InsufficientStockError: A line exceeds available stock
        """
        self._validate_lines(lines)

        try:
            async with self._transaction():
                customer = await self.customers.get_or_raise(customer_id)
                order = await self._insert_order(customer, notes)

                total = Decimal("0.00")
                for position, line in enumerate(lines, start=1):
                    product = await self.ledger.lock(line.product_id)
                    if not product.has_stock(line.quantity):
                        raise InsufficientStockError(
                            product.product_id,
                            requested=line.quantity,
                            available=product.stock_quantity,
                            sku=product.sku,
                        )
                    await self.ledger.decrement(product.product_id, line.quantity)

                    unit_price = product.price
                    line_total = (unit_price * line.quantity).quantize(CENTS)
                    order.items.append(
                        OrderItem(
                            product_id=product.product_id,
                            product=product,
                            line_number=position,
                            quantity=line.quantity,
                            unit_price=unit_price,
                            total_price=line_total,
                        )
                    )
                    total += line_total

                order.total_amount = total.quantize(CENTS)
                await self.db.flush()

                order_id = order.order_id
                order_number = order.order_number
                order_total = order.total_amount
                result = await self.orders.get_with_details(order_id, refresh=True)
        except InsufficientStockError as exc:
            logger.warning(
                "order_rejected",
                reason="insufficient_stock",
                customer_id=str(customer_id),
                product_id=str(exc.product_id),
                requested=exc.requested,
                available=exc.available,
                **self.ctx.to_log_dict(),
            )
            raise

        logger.info(
            "order_created",
            order_id=str(order_id),
            order_number=order_number,
            total_amount=str(order_total),
            item_count=len(lines),
            **self.ctx.to_log_dict(),
        )
        return result

    async def _insert_order(self, customer: Customer, notes: str | None) -> Order:
        """Insert a pending order under a freshly generated, unique number.

        Each attempt runs in a SAVEPOINT so that a number collision only
        undoes that insert, not the enclosing unit of work.
        """
        attempts = self.settings.ORDER_NUMBER_MAX_ATTEMPTS
        for attempt in range(1, attempts + 1):
            order_number = generate_order_number(self.settings.ORDER_NUMBER_PREFIX)
            order = Order(
                order_number=order_number,
                customer_id=customer.customer_id,
                customer=customer,
                status=OrderStatus.PENDING,
                total_amount=Decimal("0.00"),
                notes=notes,
                items=[],
            )
            try:
                async with self.db.begin_nested():
                    await self.orders.create(order)
                return order
            except IntegrityError:
                logger.warning(
                    "order_number_collision",
                    order_number=order_number,
                    attempt=attempt,
                    **self.ctx.to_log_dict(),
                )
        raise OrderNumberExhaustedError(attempts)

    # -------------------------------------------------------------------------
    # Cancel / transition
    # -------------------------------------------------------------------------

    async def cancel_order(self, order_id: UUID) -> Order:
        """Cancel an order and return its stock.

        Raises:
            NotFoundError: If the order does not exist for this tenant
            InvalidTransitionError: If the order is already cancelled
        """
        async with self._transaction():
            order = await self._lock_order(order_id)
            if not order.can_be_cancelled():
                raise InvalidTransitionError(order.status.value, OrderStatus.CANCELLED.value)
            previous = order.status
            await self._cancel_locked(order)
            result = await self.orders.get_with_details(order_id, refresh=True)

        logger.info(
            "order_cancelled",
            order_id=str(order_id),
            previous_status=previous.value,
            **self.ctx.to_log_dict(),
        )
        return result

    async def update_status(self, order_id: UUID, new_status: OrderStatus) -> Order:
        """Move an order to a new status.

        Cancellation always goes through the compensating path, so stock is
        returned no matter which entry point requested it.

        Raises:
            NotFoundError: If the order does not exist for this tenant
            InvalidTransitionError: If the state machine forbids the change
            InvalidInputError: If the status is not a known order status
        """
        try:
            new_status = OrderStatus(new_status)
        except ValueError:
            raise InvalidInputError(f"Unknown order status: {new_status!r}", "status") from None

        async with self._transaction():
            order = await self._lock_order(order_id)
            previous = order.status
            assert_transition(previous, new_status)

            if new_status == OrderStatus.CANCELLED:
                await self._cancel_locked(order)
            else:
                await self.orders.update(order, {"status": new_status})

            result = await self.orders.get_with_details(order_id, refresh=True)

        logger.info(
            "order_status_updated",
            order_id=str(order_id),
            previous_status=previous.value,
            new_status=new_status.value,
            **self.ctx.to_log_dict(),
        )
        return result

    async def _lock_order(self, order_id: UUID) -> Order:
        order = await self.orders.lock_with_items(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    async def _cancel_locked(self, order: Order) -> None:
        """Release stock for every item and mark the order cancelled.

        Caller must hold the order lock inside an open unit of work.
        """
        for item in order.items:
            if item.product_id is None:
                # Product was deleted after the order was placed
                continue
            await self.ledger.increment(item.product_id, item.quantity)

        await self.orders.update(order, {"status": OrderStatus.CANCELLED})
