"""API schemas for order endpoints.

Request and response shapes are kept separate from the ORM models so the
wire format can evolve independently.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from poscore.db.models.order import Order, OrderItem, OrderStatus

# =============================================================================
# Request Schemas
# =============================================================================


class OrderItemRequest(BaseModel):
    """One requested line of a new order."""

    product_id: UUID
    quantity: int = Field(..., ge=1, description="Units requested (at least 1)")


class OrderCreateRequest(BaseModel):
    """Request body for placing an order.

    Example:
        {
            "customer_id": "019478f2-0000-7000-8000-000000000010",
            "items": [
                {"product_id": "019478f2-0000-7000-8000-000000000001", "quantity": 3}
            ]
        }
    """

    customer_id: UUID
    items: list[OrderItemRequest] = Field(..., min_length=1)
    notes: str | None = Field(default=None, max_length=2000)


class OrderStatusUpdateRequest(BaseModel):
    """Request body for moving an order to a new status."""

    status: OrderStatus


# =============================================================================
# Response Schemas
# =============================================================================


class OrderItemResponse(BaseModel):
    """A line of an order as returned by the API."""

    item_id: UUID
    line_number: int
    product_id: UUID | None = Field(
        default=None, description="None once the product has been deleted"
    )
    sku: str | None = None
    product_name: str | None = None
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class OrderCustomerSummary(BaseModel):
    customer_id: UUID
    name: str
    email: str | None = None


class OrderResponse(BaseModel):
    """An order with its items and customer."""

    order_id: UUID
    order_number: str
    status: OrderStatus
    customer: OrderCustomerSummary
    items: list[OrderItemResponse]
    total_amount: Decimal
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class OrderListResponse(BaseModel):
    """Paginated list of orders."""

    items: list[OrderResponse]
    limit: int
    offset: int


# =============================================================================
# Conversion
# =============================================================================


def order_item_response_from_model(item: OrderItem) -> OrderItemResponse:
    product = item.product
    return OrderItemResponse(
        item_id=item.item_id,
        line_number=item.line_number,
        product_id=item.product_id,
        sku=product.sku if product is not None else None,
        product_name=product.name if product is not None else None,
        quantity=item.quantity,
        unit_price=item.unit_price,
        total_price=item.total_price,
    )


def order_response_from_model(order: Order) -> OrderResponse:
    """Build the API representation of an order loaded with its details."""
    customer = order.customer
    return OrderResponse(
        order_id=order.order_id,
        order_number=order.order_number,
        status=order.status,
        customer=OrderCustomerSummary(
            customer_id=customer.customer_id,
            name=customer.name,
            email=customer.email,
        ),
        items=[order_item_response_from_model(item) for item in order.items],
        total_amount=order.total_amount,
        notes=order.notes,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )
