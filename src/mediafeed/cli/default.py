"""Default mode implementation for mediafeed.

Initializes the backend client, the favorites database and the library
session, then serves the HTTP API until shutdown.
"""

import logging

from ..backend import RestCatalogBackend
from ..config import AppSettings
from ..db import FavoritesDatabase, SqlalchemyCore
from ..device_notifier import DeviceNotificationCenter
from ..exceptions import DatabaseOperationError
from ..library_session import LibrarySession
from ..server import create_server

logger = logging.getLogger(__name__)


async def graceful_shutdown(
    session: LibrarySession | None,
    backend: RestCatalogBackend | None,
    db_core: SqlalchemyCore | None,
) -> None:
    """Shut down all components in order.

    Args:
        session: The library session to stop.
        backend: The backend client to close.
        db_core: The database core to close.
    """
    logger.info("Shutdown signal received.")

    # Stop the subscription and let fire-and-forget calls settle first
    if session:
        try:
            await session.stop()
        except Exception as e:
            logger.error("Error stopping library session.", exc_info=e)

    if backend:
        try:
            await backend.aclose()
            logger.info("Backend client closed.")
        except Exception as e:
            logger.error("Error closing backend client.", exc_info=e)

    if db_core:
        try:
            await db_core.close()
            logger.info("Database connections closed.")
        except Exception as e:
            logger.error("Error closing database connections.", exc_info=e)

    logger.info("mediafeed shutdown completed.")


async def _init(
    settings: AppSettings,
) -> tuple[
    SqlalchemyCore,
    RestCatalogBackend,
    DeviceNotificationCenter,
    LibrarySession,
]:
    try:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(
            "Failed to create data directory.",
            extra={"data_dir": str(settings.data_dir)},
            exc_info=e,
        )
        raise DatabaseOperationError("Failed to create data directory.") from e

    logger.debug("Initializing components.")
    db_core = SqlalchemyCore(settings.data_dir)
    favorites_db = FavoritesDatabase(db_core)
    backend = RestCatalogBackend(
        base_url=settings.backend_url,
        api_key=settings.backend_api_key,
        timeout=settings.backend_timeout,
    )
    device_center = DeviceNotificationCenter(
        grant_on_request=settings.device_notifications
    )
    session = LibrarySession(
        backend=backend,
        favorites_db=favorites_db,
        device=device_center,
        context=settings.session_context(),
        page_size=settings.page_size,
        notification_icon=settings.notification_icon,
    )
    return db_core, backend, device_center, session


async def default(settings: AppSettings) -> None:
    """Run the service until shutdown.

    Args:
        settings: Application settings object containing configuration.
    """
    logger.debug(
        "Starting mediafeed.",
        extra={"config_file": str(settings.config_file)},
    )

    db_core: SqlalchemyCore | None = None
    backend: RestCatalogBackend | None = None
    session: LibrarySession | None = None
    try:
        db_core, backend, device_center, session = await _init(settings)
        await session.start()

        server = create_server(
            settings=settings,
            library_session=session,
            device_center=device_center,
            shutdown_callback=lambda: graceful_shutdown(session, backend, db_core),
        )

        logger.info(
            "Starting HTTP server...",
            extra={
                "server_host": settings.server_host,
                "server_port": settings.server_port,
            },
        )

        # Will gracefully shutdown on SIGINT/SIGTERM
        await server.serve()
    except Exception as e:
        logger.error("Unexpected error during execution.", exc_info=e)
        await graceful_shutdown(session, backend, db_core)
