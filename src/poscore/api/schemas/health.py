"""Health check response schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    """Health status indicators."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class HealthResponse(BaseModel):
    """Liveness response."""

    status: HealthStatus = Field(..., description="Overall health status")
    version: str = Field(..., description="Application version")
    timestamp: datetime = Field(..., description="Check timestamp")


class ComponentHealth(BaseModel):
    status: HealthStatus
    message: str | None = None
    latency_ms: float | None = None


class StoreDetails(BaseModel):
    """What the database check learned about the store backend."""

    backend: str = Field(..., description="SQLAlchemy dialect name, e.g. sqlite or postgresql")
    active_tenants: int | None = Field(
        default=None, description="Active tenants; None when the schema is unavailable"
    )


class HealthDetailResponse(HealthResponse):
    """Database connectivity plus schema readiness.

    ``degraded`` means the database answers but the poscore tables are not
    usable (for example, migrations have not run).
    """

    database: ComponentHealth = Field(..., description="Connectivity")
    schema_check: ComponentHealth | None = Field(
        default=None, alias="schema", description="Core tables readable"
    )
    details: StoreDetails | None = None

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {"example": {
            "status": "healthy",
            "version": "0.1.0",
            "timestamp": "2026-01-30T12:00:00Z",
            "database": {"status": "healthy", "latency_ms": 1.5},
            "schema": {"status": "healthy", "latency_ms": 0.8},
            "details": {"backend": "postgresql", "active_tenants": 12},
        }},
    }
