"""Device-level notification collaborator.

Device notifications are permission gated and keyed by a tag: showing a
notification with a tag that is already displayed replaces it.
"""

from datetime import UTC, datetime
import logging
from typing import Protocol

from pydantic import AwareDatetime, BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class DeviceNotification(BaseModel):
    """A notification handed to the device.

    Attributes:
        tag: Replacement key; the catalog item id for new-item notifications.
        title: Notification title.
        body: Notification body.
        icon: Icon URL.
        shown_at: When the notification was shown.
    """

    model_config = ConfigDict(frozen=True)

    tag: str
    title: str
    body: str
    icon: str = ""
    shown_at: AwareDatetime


class DeviceNotifier(Protocol):
    """Protocol for the device notification API."""

    @property
    def permission_granted(self) -> bool:
        """Whether the user granted notification permission."""
        ...

    def request_permission(self) -> bool:
        """Ask for notification permission and return the outcome."""
        ...

    def show(self, tag: str, title: str, body: str, icon: str = "") -> bool:
        """Show a notification keyed by ``tag``.

        Returns:
            True if the notification was shown.
        """
        ...


class DeviceNotificationCenter:
    """In-process device notifier that keeps displayed notifications.

    The presentation layer polls :meth:`pending` to render popups and calls
    :meth:`dismiss` once they are closed.

    Attributes:
        _grant_on_request: Outcome returned when permission is requested.
        _granted: Current permission state.
        _displayed: Displayed notifications keyed by tag, oldest first.
    """

    def __init__(self, grant_on_request: bool = True) -> None:
        self._grant_on_request = grant_on_request
        self._granted = False
        self._displayed: dict[str, DeviceNotification] = {}

    @property
    def permission_granted(self) -> bool:
        return self._granted

    def request_permission(self) -> bool:
        self._granted = self._grant_on_request
        logger.info(
            "Device notification permission requested.",
            extra={"granted": self._granted},
        )
        return self._granted

    def show(self, tag: str, title: str, body: str, icon: str = "") -> bool:
        if not self._granted:
            logger.debug(
                "Device notification suppressed; permission not granted.",
                extra={"tag": tag},
            )
            return False

        # Same tag replaces the displayed notification and moves it to the end
        self._displayed.pop(tag, None)
        self._displayed[tag] = DeviceNotification(
            tag=tag,
            title=title,
            body=body,
            icon=icon,
            shown_at=datetime.now(UTC),
        )
        logger.debug("Device notification shown.", extra={"tag": tag})
        return True

    def pending(self) -> list[DeviceNotification]:
        """Return the displayed notifications, oldest first."""
        return list(self._displayed.values())

    def dismiss(self, tag: str) -> bool:
        """Close the notification with ``tag``.

        Returns:
            True if a notification was closed.
        """
        return self._displayed.pop(tag, None) is not None
