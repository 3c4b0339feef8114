"""Command-line interface entry point for mediafeed.

This module loads the settings, configures logging and starts the service.
"""

import logging

from ..config import AppSettings
from ..logging_config import setup_logging
from .default import default


async def main_cli():
    """Load settings, configure logging and run the service."""
    settings = AppSettings()  # type: ignore

    setup_logging(
        log_format_type=settings.log_format,
        app_log_level_name=settings.log_level,
        include_stacktrace=settings.log_include_stacktrace,
    )

    logger = logging.getLogger(__name__)

    logger.debug(
        "Application logging configured.",
        extra={
            "log_format": settings.log_format,
            "log_level": settings.log_level,
            "include_stacktrace": settings.log_include_stacktrace,
        },
    )
    logger.debug(
        "Application settings loaded.",
        extra={
            "config_file": str(settings.config_file),
            "backend_url": settings.backend_url,
            "user_id": settings.user_id,
            "user_role": settings.user_role,
        },
    )

    await default(settings)

    logger.debug("main_cli execution finished.")
