"""In-app and device notification endpoints."""

from fastapi import APIRouter, HTTPException, Response
from pydantic import BaseModel

from ...device_notifier import DeviceNotification
from ...exceptions import NotFoundError
from ...types import CatalogItem, Notification
from ..dependencies import DeviceCenterDep, LibrarySessionDep
from ..validation import ValidatedNotificationId

router = APIRouter(prefix="/api")


class NotificationsResponse(BaseModel):
    """Notification list, newest first, with the unread count."""

    notifications: list[Notification]
    unread_count: int


class MarkAllReadResponse(BaseModel):
    marked: int


@router.get("/notifications", response_model=NotificationsResponse)
async def list_notifications(session: LibrarySessionDep) -> NotificationsResponse:
    return NotificationsResponse(
        notifications=session.notifications(),
        unread_count=session.unread_count(),
    )


@router.post("/notifications/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(session: LibrarySessionDep) -> MarkAllReadResponse:
    return MarkAllReadResponse(marked=session.mark_all_read())


@router.post("/notifications/{notification_id}/read", response_model=Notification)
async def mark_read(
    notification_id: ValidatedNotificationId, session: LibrarySessionDep
) -> Notification:
    try:
        return session.mark_read(notification_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Notification not found") from e


@router.post("/notifications/{notification_id}/open", response_model=None)
async def open_notification(
    notification_id: ValidatedNotificationId, session: LibrarySessionDep
) -> CatalogItem | Response:
    """Play the notification's item, or do nothing if it is gone.

    Returns:
        The played item, or an empty 204 response.
    """
    try:
        item = session.open_notification(notification_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Notification not found") from e
    if item is None:
        return Response(status_code=204)
    return item


@router.get("/device-notifications", response_model=list[DeviceNotification])
async def list_device_notifications(
    device: DeviceCenterDep,
) -> list[DeviceNotification]:
    """Return the device notifications currently displayed."""
    return device.pending()


@router.delete("/device-notifications/{tag}", status_code=204)
async def dismiss_device_notification(
    tag: ValidatedNotificationId, device: DeviceCenterDep
) -> Response:
    if not device.dismiss(tag):
        raise HTTPException(status_code=404, detail="Device notification not found")
    return Response(status_code=204)
