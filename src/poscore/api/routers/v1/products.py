"""Product API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from poscore.api.dependencies import get_catalog_service
from poscore.api.schemas.catalog import (
    ProductCreateRequest,
    ProductResponse,
    ProductUpdateRequest,
    RestockRequest,
)
from poscore.api.schemas.errors import APIError
from poscore.catalog.service import CatalogService

router = APIRouter(prefix="/products", tags=["products"])

CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
    responses={409: {"model": APIError, "description": "SKU already exists"}},
)
async def create_product(body: ProductCreateRequest, service: CatalogServiceDep) -> ProductResponse:
    product = await service.create_product(**body.model_dump())
    return ProductResponse.model_validate(product)


@router.get("", response_model=list[ProductResponse], summary="List products")
async def list_products(
    service: CatalogServiceDep,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[ProductResponse]:
    products = await service.list_products(limit=limit, offset=offset)
    return [ProductResponse.model_validate(p) for p in products]


@router.get(
    "/low-stock",
    response_model=list[ProductResponse],
    summary="Products at or below their low-stock threshold",
)
async def low_stock_products(
    service: CatalogServiceDep,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[ProductResponse]:
    products = await service.low_stock_products(limit=limit, offset=offset)
    return [ProductResponse.model_validate(p) for p in products]


@router.get(
    "/by-sku/{sku}",
    response_model=ProductResponse,
    summary="Get a product by SKU",
    responses={404: {"model": APIError, "description": "No product with this SKU"}},
)
async def get_product_by_sku(sku: str, service: CatalogServiceDep) -> ProductResponse:
    return ProductResponse.model_validate(await service.find_product_by_sku(sku))


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get a product",
    responses={404: {"model": APIError, "description": "Product not found"}},
)
async def get_product(product_id: UUID, service: CatalogServiceDep) -> ProductResponse:
    return ProductResponse.model_validate(await service.get_product(product_id))


@router.patch(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Update a product",
    responses={
        404: {"model": APIError, "description": "Product not found"},
        409: {"model": APIError, "description": "SKU already exists"},
    },
)
async def update_product(
    product_id: UUID,
    body: ProductUpdateRequest,
    service: CatalogServiceDep,
) -> ProductResponse:
    product = await service.update_product(product_id, **body.model_dump(exclude_none=True))
    return ProductResponse.model_validate(product)


@router.post(
    "/{product_id}/restock",
    response_model=ProductResponse,
    summary="Add stock to a product",
    responses={404: {"model": APIError, "description": "Product not found"}},
)
async def restock_product(
    product_id: UUID,
    body: RestockRequest,
    service: CatalogServiceDep,
) -> ProductResponse:
    return ProductResponse.model_validate(await service.restock(product_id, body.quantity))


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product",
    responses={404: {"model": APIError, "description": "Product not found"}},
)
async def delete_product(product_id: UUID, service: CatalogServiceDep) -> Response:
    await service.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
