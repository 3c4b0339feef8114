"""FastAPI application factory for the mediafeed HTTP server.

This module provides the factory function for creating and configuring
the FastAPI application instance with its middleware and routers.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ..device_notifier import DeviceNotificationCenter
from ..library_session import LibrarySession
from .routers import events, health, hooks, library, notifications

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log HTTP requests and responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        logger.debug(
            "HTTP request received",
            extra={
                "method": request.method,
                "path": request.url.path,
                "client": request.client.host if request.client else None,
            },
        )

        response = await call_next(request)

        logger.debug(
            "HTTP response sent",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
            },
        )

        return response


def create_app(
    library_session: LibrarySession,
    device_center: DeviceNotificationCenter,
    shutdown_callback: Callable[[], Awaitable[None]] | None = None,
) -> FastAPI:
    """Create and configure a FastAPI application instance.

    Args:
        library_session: The library session served by the app.
        device_center: Device notification center polled by the client.
        shutdown_callback: Optional callback awaited when the app shuts down.

    Returns:
        Configured FastAPI application instance.
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
        """Handle application lifespan events."""
        try:
            yield
        finally:
            if shutdown_callback:
                await shutdown_callback()

    app = FastAPI(
        title="mediafeed",
        description="Media library feed sync and derived views",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)

    app.state.library_session = library_session
    app.state.device_center = device_center

    app.include_router(health.router, tags=["health"])
    app.include_router(library.router, tags=["library"])
    app.include_router(notifications.router, tags=["notifications"])
    app.include_router(events.router, tags=["events"])
    app.include_router(hooks.router, tags=["hooks"])

    logger.debug("FastAPI application created.")
    return app
