"""Customer API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from poscore.api.dependencies import get_catalog_service
from poscore.api.schemas.catalog import (
    CustomerCreateRequest,
    CustomerResponse,
    CustomerUpdateRequest,
)
from poscore.api.schemas.errors import APIError
from poscore.catalog.service import CatalogService

router = APIRouter(prefix="/customers", tags=["customers"])

CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]


@router.post(
    "",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a customer",
)
async def create_customer(
    body: CustomerCreateRequest, service: CatalogServiceDep
) -> CustomerResponse:
    customer = await service.create_customer(**body.model_dump())
    return CustomerResponse.model_validate(customer)


@router.get("", response_model=list[CustomerResponse], summary="List customers")
async def list_customers(
    service: CatalogServiceDep,
    email: Annotated[str | None, Query(min_length=1, max_length=255)] = None,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[CustomerResponse]:
    """List customers, or only those registered with ``email``."""
    if email is not None:
        customers = await service.find_customers_by_email(email)
    else:
        customers = await service.list_customers(limit=limit, offset=offset)
    return [CustomerResponse.model_validate(c) for c in customers]


@router.get(
    "/{customer_id}",
    response_model=CustomerResponse,
    summary="Get a customer",
    responses={404: {"model": APIError, "description": "Customer not found"}},
)
async def get_customer(customer_id: UUID, service: CatalogServiceDep) -> CustomerResponse:
    return CustomerResponse.model_validate(await service.get_customer(customer_id))


@router.patch(
    "/{customer_id}",
    response_model=CustomerResponse,
    summary="Update a customer",
    responses={404: {"model": APIError, "description": "Customer not found"}},
)
async def update_customer(
    customer_id: UUID,
    body: CustomerUpdateRequest,
    service: CatalogServiceDep,
) -> CustomerResponse:
    customer = await service.update_customer(customer_id, **body.model_dump(exclude_none=True))
    return CustomerResponse.model_validate(customer)
