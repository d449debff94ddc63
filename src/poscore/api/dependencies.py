"""FastAPI dependencies for database sessions, tenant resolution and services."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from poscore.catalog.service import CatalogService
from poscore.config.settings import Settings
from poscore.core.context import TenantContext
from poscore.core.logging import bind_contextvars
from poscore.core.tenant import TenantService
from poscore.db.transaction import read_scope
from poscore.orders.service import OrderService

__all__ = [
    "get_db",
    "get_settings_dep",
    "get_tenant_context",
    "get_order_service",
    "get_catalog_service",
]


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield one session per request from the application's session factory.

    The session is closed (and any open transaction rolled back) when the
    request finishes.
    """
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


async def get_tenant_context(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    x_tenant_id: Annotated[str | None, Header(alias="X-Tenant-ID")] = None,
) -> TenantContext:
    """Resolve the X-Tenant-ID header into the request's TenantContext.

    Raises:
        UnresolvedTenantError: If the header is missing or blank
        InvalidTenantError: If it does not name an active tenant
    """
    async with read_scope(db):
        ctx = await TenantService(db).resolve(
            x_tenant_id, request_id=getattr(request.state, "request_id", None)
        )
    request.state.tenant_id = ctx.tenant_id
    bind_contextvars(tenant_id=str(ctx.tenant_id))
    return ctx


def get_order_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[TenantContext, Depends(get_tenant_context)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
) -> OrderService:
    return OrderService(db, ctx, settings)


def get_catalog_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[TenantContext, Depends(get_tenant_context)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
) -> CatalogService:
    return CatalogService(db, ctx, settings)
