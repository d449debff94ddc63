"""Health check endpoints. Neither requires a tenant."""

import time
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from poscore import __version__
from poscore.api.dependencies import get_db
from poscore.api.schemas.health import (
    ComponentHealth,
    HealthDetailResponse,
    HealthResponse,
    HealthStatus,
    StoreDetails,
)
from poscore.db.models.tenant import Tenant

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse, summary="Liveness check")
async def health_check() -> HealthResponse:
    """Return 200 while the process is serving, whatever the database state."""
    return HealthResponse(
        status=HealthStatus.HEALTHY,
        version=__version__,
        timestamp=datetime.now(UTC),
    )


@router.get(
    "/health/db",
    response_model=HealthDetailResponse,
    summary="Database and schema check",
)
async def health_db(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HealthDetailResponse:
    """Check connectivity, then that the tenant table can be read.

    The check never holds its transaction past the response; on SQLite an
    open transaction would block order processing.
    """
    try:
        database = await _timed(db, _ping)
        schema = None
        active_tenants = None
        if database.status == HealthStatus.HEALTHY:
            schema, active_tenants = await _check_schema(db)
    finally:
        await db.rollback()

    if database.status != HealthStatus.HEALTHY:
        overall = HealthStatus.UNHEALTHY
    elif schema is None or schema.status != HealthStatus.HEALTHY:
        overall = HealthStatus.DEGRADED
    else:
        overall = HealthStatus.HEALTHY

    return HealthDetailResponse(
        status=overall,
        version=__version__,
        timestamp=datetime.now(UTC),
        database=database,
        schema_check=schema,
        details=StoreDetails(backend=db.bind.dialect.name, active_tenants=active_tenants),
    )


async def _ping(db: AsyncSession) -> None:
    await db.execute(text("SELECT 1"))


async def _timed(db: AsyncSession, check) -> ComponentHealth:
    start = time.perf_counter()
    try:
        await check(db)
    except SQLAlchemyError as e:
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message=f"{type(e).__name__}: {str(e)[:100]}",
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        latency_ms=round((time.perf_counter() - start) * 1000, 2),
    )


async def _check_schema(db: AsyncSession) -> tuple[ComponentHealth, int | None]:
    counted: list[int] = []

    async def count_active_tenants(session: AsyncSession) -> None:
        result = await session.execute(
            select(func.count()).select_from(Tenant).where(Tenant.is_active == True)  # noqa: E712
        )
        counted.append(result.scalar_one())

    health = await _timed(db, count_active_tenants)
    return health, (counted[0] if counted else None)
