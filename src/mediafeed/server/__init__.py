"""HTTP server module for mediafeed.

This module provides the FastAPI-based HTTP server that exposes one
library session to the presentation layer.
"""

from .server import create_server

__all__ = ["create_server"]
