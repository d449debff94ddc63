"""Order API endpoints.

- POST /v1/orders - Place an order (reserves stock atomically)
- GET /v1/orders - List the tenant's orders
- GET /v1/orders/{order_id} - Get one order with items
- POST /v1/orders/{order_id}/cancel - Cancel an order and return its stock
- PATCH /v1/orders/{order_id}/status - Move an order to a new status
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from poscore.api.dependencies import get_order_service
from poscore.api.schemas.errors import APIError
from poscore.api.schemas.orders import (
    OrderCreateRequest,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdateRequest,
    order_response_from_model,
)
from poscore.db.models.order import OrderStatus
from poscore.orders.service import OrderLine, OrderService

router = APIRouter(prefix="/orders", tags=["orders"])

OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order",
    responses={
        404: {"model": APIError, "description": "Unknown customer or product"},
        409: {"model": APIError, "description": "Insufficient stock"},
        422: {"model": APIError, "description": "Validation error"},
    },
)
async def create_order(body: OrderCreateRequest, service: OrderServiceDep) -> OrderResponse:
    """Place an order.

    Either every line is reserved and the order is created, or nothing
    changes at all.
    """
    order = await service.create_order(
        body.customer_id,
        [OrderLine(product_id=item.product_id, quantity=item.quantity) for item in body.items],
        notes=body.notes,
    )
    return order_response_from_model(order)


@router.get("", response_model=OrderListResponse, summary="List orders")
async def list_orders(
    service: OrderServiceDep,
    order_status: Annotated[OrderStatus | None, Query(alias="status")] = None,
    customer_id: UUID | None = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> OrderListResponse:
    orders = await service.list_orders(
        status=order_status, customer_id=customer_id, limit=limit, offset=offset
    )
    return OrderListResponse(
        items=[order_response_from_model(order) for order in orders],
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get an order",
    responses={404: {"model": APIError, "description": "Order not found"}},
)
async def get_order(order_id: UUID, service: OrderServiceDep) -> OrderResponse:
    return order_response_from_model(await service.get_order(order_id))


@router.post(
    "/{order_id}/cancel",
    response_model=OrderResponse,
    summary="Cancel an order",
    responses={
        404: {"model": APIError, "description": "Order not found"},
        409: {"model": APIError, "description": "Order already cancelled"},
    },
)
async def cancel_order(order_id: UUID, service: OrderServiceDep) -> OrderResponse:
    return order_response_from_model(await service.cancel_order(order_id))


@router.patch(
    "/{order_id}/status",
    response_model=OrderResponse,
    summary="Update order status",
    responses={
        404: {"model": APIError, "description": "Order not found"},
        409: {"model": APIError, "description": "Transition not allowed"},
    },
)
async def update_order_status(
    order_id: UUID,
    body: OrderStatusUpdateRequest,
    service: OrderServiceDep,
) -> OrderResponse:
    """Move an order to a new status.

    Setting ``cancelled`` here has the same effect as the cancel endpoint,
    including returning stock.
    """
    return order_response_from_model(await service.update_status(order_id, body.status))
