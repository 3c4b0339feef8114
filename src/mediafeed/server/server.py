"""HTTP server initialization for mediafeed.

This module creates the uvicorn server hosting the FastAPI application.
"""

from collections.abc import Awaitable, Callable
import logging

import uvicorn

from ..config import AppSettings
from ..device_notifier import DeviceNotificationCenter
from ..library_session import LibrarySession
from ..logging_config import LOGGING_CONFIG
from .app import create_app

logger = logging.getLogger(__name__)


def create_server(
    settings: AppSettings,
    library_session: LibrarySession,
    device_center: DeviceNotificationCenter,
    shutdown_callback: Callable[[], Awaitable[None]] | None = None,
) -> uvicorn.Server:
    """Create and configure a uvicorn HTTP server with the FastAPI app.

    Args:
        settings: Application settings containing server configuration.
        library_session: The library session served by the app.
        device_center: Device notification center polled by the client.
        shutdown_callback: Optional callback to execute during shutdown.

    Returns:
        Configured uvicorn server ready to run.
    """
    logger.debug("Creating FastAPI application.")
    app = create_app(
        library_session=library_session,
        device_center=device_center,
        shutdown_callback=shutdown_callback,
    )

    config = uvicorn.Config(
        app=app,
        host=settings.server_host,
        port=settings.server_port,
        log_config=LOGGING_CONFIG,  # Use our own logging configuration
        access_log=False,  # We have our own logging middleware
        ws="none",
        lifespan="on",  # Enable lifespan for shutdown handling
    )
    server = uvicorn.Server(config)

    logger.debug(
        "HTTP server configured.",
        extra={"host": settings.server_host, "port": settings.server_port},
    )
    return server
