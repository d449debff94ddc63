"""Pytest fixtures for poscore tests."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from decimal import Decimal
from pathlib import Path
from uuid import UUID

import pytest
import pytest_asyncio
import structlog
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from uuid_utils.compat import uuid7

from poscore.catalog.service import CatalogService
from poscore.config.settings import Settings
from poscore.core.context import TenantContext, create_context
from poscore.core.tenant import TenantService
from poscore.db.config import build_engine, build_session_factory
from poscore.db.models.base import Base
from poscore.db.models.customer import Customer
from poscore.db.models.product import Product
from poscore.db.models.tenant import Tenant
from poscore.db.repositories.product import ProductRepository


# =============================================================================
# Structlog Configuration Fixture
# =============================================================================


@pytest.fixture(scope="function", autouse=True)
def reset_structlog_after_test():
    """Reset structlog configuration after each test.

    This ensures tests that modify structlog global state
    don't affect other tests.
    """
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings backed by a file SQLite database.

    A file (not ``:memory:``) lets several sessions hold their own
    connections, so concurrent units of work really contend.
    """
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'poscore-test.db'}",
        ENVIRONMENT="test",
        DEBUG=True,
        log_level="DEBUG",
        LOCK_TIMEOUT_MS=15000,
    )


@pytest_asyncio.fixture
async def test_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """Create a test database engine with all tables."""
    engine = build_engine(test_settings)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(test_engine)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


# =============================================================================
# Tenant and catalog fixtures
# =============================================================================
# Seed data is written through its own short-lived session, so the returned
# objects are detached with their attributes loaded and are unaffected by
# rollbacks in the session under test.


async def _create_tenant(session_factory, name: str, prefix: str) -> Tenant:
    async with session_factory() as session:
        tenant = await TenantService(session).create_tenant(
            name=name, slug=f"{prefix}-{uuid7().hex[:16]}"
        )
        await session.commit()
        return tenant


@pytest_asyncio.fixture
async def tenant_a(session_factory) -> Tenant:
    return await _create_tenant(session_factory, "Tenant A", "ta")


@pytest_asyncio.fixture
async def tenant_b(session_factory) -> Tenant:
    return await _create_tenant(session_factory, "Tenant B", "tb")


@pytest.fixture
def ctx_a(tenant_a: Tenant) -> TenantContext:
    return create_context(tenant_id=tenant_a.tenant_id)


@pytest.fixture
def ctx_b(tenant_b: Tenant) -> TenantContext:
    return create_context(tenant_id=tenant_b.tenant_id)


ProductFactory = Callable[..., Awaitable[Product]]


@pytest.fixture
def make_product(session_factory, test_settings) -> ProductFactory:
    """Factory that creates a committed product for a tenant."""

    async def _make(
        ctx: TenantContext,
        *,
        stock: int = 10,
        price: str = "10.00",
        sku: str | None = None,
        name: str = "Widget",
        low_stock_threshold: int = 2,
    ) -> Product:
        async with session_factory() as session:
            return await CatalogService(session, ctx, test_settings).create_product(
                name=name,
                sku=sku or f"SKU-{uuid7().hex[-8:]}",
                price=Decimal(price),
                stock_quantity=stock,
                low_stock_threshold=low_stock_threshold,
            )

    return _make


@pytest.fixture
def make_customer(session_factory, test_settings) -> Callable[..., Awaitable[Customer]]:
    """Factory that creates a committed customer for a tenant."""

    async def _make(ctx: TenantContext, *, name: str = "Ada Buyer") -> Customer:
        async with session_factory() as session:
            return await CatalogService(session, ctx, test_settings).create_customer(
                name=name, email="Ada@Example.com"
            )

    return _make


@pytest_asyncio.fixture
async def customer_a(make_customer, ctx_a) -> Customer:
    return await make_customer(ctx_a)


@pytest.fixture
def stock_of(session_factory) -> Callable[[TenantContext, UUID], Awaitable[int | None]]:
    """Read committed stock for a product through a fresh session."""

    async def _read(ctx: TenantContext, product_id: UUID) -> int | None:
        async with session_factory() as session:
            return await ProductRepository(session, ctx).current_stock(product_id)

    return _read


# =============================================================================
# API test fixtures
# =============================================================================


@pytest_asyncio.fixture
async def test_app(
    test_settings: Settings, test_engine: AsyncEngine
) -> AsyncGenerator[FastAPI, None]:
    """Create a FastAPI test application bound to the test database.

    Depends on ``test_engine`` so the schema exists before the first request.
    """
    from poscore.api.app import create_app

    app = create_app(settings=test_settings)
    yield app
    await app.state.engine.dispose()


@pytest_asyncio.fixture
async def test_client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for API testing.

    Provides an httpx.AsyncClient configured to call the test application
    directly without network overhead.
    """
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as client:
        yield client


@pytest_asyncio.fixture
async def tenant_client(
    test_app: FastAPI,
    tenant_a: Tenant,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client that sends tenant A's X-Tenant-ID header."""
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
        headers={"X-Tenant-ID": str(tenant_a.tenant_id)},
    ) as client:
        yield client
