"""Request context middleware: request ids and log correlation."""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from uuid_utils.compat import uuid7

from poscore.core.logging import bind_contextvars, clear_contextvars


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware that assigns a request id to every request.

    Tenant resolution is not done here; it happens in the
    ``get_tenant_context`` dependency so that only tenant-scoped routes
    require the X-Tenant-ID header.

    Sets:
        request.state.request_id: The generated request ID (UUIDv7)
        X-Request-ID response header: For client correlation
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request with a fresh logging context."""
        request_id = uuid7()
        request.state.request_id = request_id

        clear_contextvars()
        bind_contextvars(request_id=str(request_id))

        response = await call_next(request)
        response.headers["X-Request-ID"] = str(request_id)
        return response
