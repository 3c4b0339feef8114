"""Dependency provider functions for FastAPI endpoints.

This module contains functions that retrieve dependencies from the
application state for use in FastAPI endpoints via the Depends system.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from mediafeed.device_notifier import DeviceNotificationCenter
from mediafeed.library_session import LibrarySession
from mediafeed.types import SessionContext


def get_library_session(request: Request) -> LibrarySession:
    """Return the :class:`LibrarySession` bound to the app.

    Args:
        request: Incoming FastAPI request.

    Returns:
        Library session stored on ``app.state``.
    """
    return request.app.state.library_session


def get_device_center(request: Request) -> DeviceNotificationCenter:
    """Return the device notification center stored on ``app.state``."""
    return request.app.state.device_center


def get_session_context(request: Request) -> SessionContext:
    """Return the signed-in session context of the library session."""
    return request.app.state.library_session.context


LibrarySessionDep = Annotated[LibrarySession, Depends(get_library_session)]
DeviceCenterDep = Annotated[DeviceNotificationCenter, Depends(get_device_center)]
SessionContextDep = Annotated[SessionContext, Depends(get_session_context)]


def require_admin(context: SessionContextDep) -> None:
    """Reject the request unless the signed-in user is an admin.

    Raises:
        HTTPException: 403 for non-admin users.
    """
    if not context.is_admin:
        raise HTTPException(status_code=403, detail="Admin role required")
