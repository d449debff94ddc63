"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from poscore import __version__
from poscore.api.middleware import (
    ErrorHandlingMiddleware,
    RequestContextMiddleware,
    RequestLoggingMiddleware,
    request_validation_handler,
)
from poscore.api.routers import health_router, v1_router
from poscore.config.settings import Settings, get_settings
from poscore.core.logging import get_logger, setup_logging
from poscore.db.config import build_engine, build_session_factory, close_db, init_db

logger = get_logger("poscore.api")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    The engine and session factory are built here and stored on
    ``app.state`` so that each application instance (and each test) owns
    its own database binding.

    Args:
        settings: Optional settings override (useful for testing)

    Returns:
        Configured FastAPI application

    Example:
        # Production
        app = create_app()

        # Testing
        app = create_app(settings=Settings(DATABASE_URL="sqlite+aiosqlite:///test.db"))

        # Run with uvicorn
        uvicorn poscore.api.app:create_app --factory
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="POS Core API",
        description="Multi-tenant point-of-sale backend",
        version=__version__,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=_lifespan,
    )

    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)

    _configure_middleware(app, settings)
    _configure_routers(app)

    return app


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Args:
        app: FastAPI application

    Yields:
        None (context for application lifetime)
    """
    settings: Settings = app.state.settings
    setup_logging(log_level=settings.log_level)
    logger.info("api_starting", environment=settings.ENVIRONMENT, version=__version__)

    await init_db(app.state.engine)
    logger.info("database_connected")

    yield

    logger.info("api_stopping")
    await close_db(app.state.engine)


def _configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure middleware stack.

    Middleware order (outermost to innermost execution):
    1. RequestContextMiddleware - Assigns request id, binds log context
    2. RequestLoggingMiddleware - Logs all requests
    3. ErrorHandlingMiddleware - Converts exceptions to HTTP responses

    Note: Middleware is added in reverse order because Starlette
    processes them from last-added to first-added.

    Args:
        app: FastAPI application
        settings: Application settings
    """
    app.add_middleware(ErrorHandlingMiddleware, debug=settings.DEBUG)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestContextMiddleware)

    # Request body/query validation is raised before the middleware sees it
    app.add_exception_handler(RequestValidationError, request_validation_handler)


def _configure_routers(app: FastAPI) -> None:
    """Configure API routers.

    Args:
        app: FastAPI application
    """
    # Health check endpoints (no prefix, no tenant)
    app.include_router(health_router)

    # Tenant-scoped API v1 routers
    app.include_router(v1_router)
