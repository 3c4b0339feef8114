"""Secondary events feed and calendar export."""

from datetime import UTC, datetime, timedelta
import logging
import re

from .backend import CatalogBackend
from .backend.records import event_from_row
from .exceptions import (
    BackendError,
    EventCreateError,
    EventDeleteError,
    MalformedRecordError,
)
from .types import EventEntry, SessionContext

logger = logging.getLogger(__name__)

ICS_PRODID = "-//St. Refka Church//Media Center//EN"
EVENT_DURATION = timedelta(hours=1)
_ICS_FILENAME_UNSAFE = re.compile(r"[^a-zA-Z0-9\u0600-\u06FF ]")


def _ics_stamp(value: datetime) -> str:
    return value.astimezone(UTC).strftime("%Y%m%dT%H%M%SZ")


def _ics_text(value: str) -> str:
    """Escape a TEXT property value; line breaks become literal \\n."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
    )
    return escaped.replace("\r", "\\n").replace("\n", "\\n")


def to_ics(event: EventEntry) -> str:
    """Render ``event`` as a one-hour VCALENDAR document with CRLF endings."""
    start = event.event_date
    return "\r\n".join(
        [
            "BEGIN:VCALENDAR",
            "VERSION:2.0",
            f"PRODID:{ICS_PRODID}",
            "BEGIN:VEVENT",
            f"DTSTART:{_ics_stamp(start)}",
            f"DTEND:{_ics_stamp(start + EVENT_DURATION)}",
            f"SUMMARY:{_ics_text(event.title)}",
            f"DESCRIPTION:Church Event - {_ics_text(event.title)}",
            "END:VEVENT",
            "END:VCALENDAR",
        ]
    )


def ics_filename(event: EventEntry) -> str:
    """Return a download file name derived from the event title."""
    return f"{_ICS_FILENAME_UNSAFE.sub('_', event.title)}.ics"


class EventsFeed:
    """In-session list of scheduled events.

    Additions and deletions wait for the backend and only then change the
    list.

    Attributes:
        _backend: Backend collaborator.
        _context: Signed-in session.
        _events: Events keyed by id.
    """

    def __init__(self, backend: CatalogBackend, context: SessionContext) -> None:
        self._backend = backend
        self._context = context
        self._events: dict[str, EventEntry] = {}

    def __len__(self) -> int:
        return len(self._events)

    def get(self, event_id: str) -> EventEntry | None:
        return self._events.get(event_id)

    async def load(self) -> list[EventEntry]:
        """Replace the list with the backend's events.

        Malformed rows are logged and skipped.

        Raises:
            BackendError: If the events cannot be fetched.
        """
        rows = await self._backend.fetch_events()
        events: dict[str, EventEntry] = {}
        for row in rows:
            try:
                event = event_from_row(row)
            except MalformedRecordError as e:
                logger.warning(
                    "Skipping malformed event row.",
                    extra={"event_id": row.get("id")},
                    exc_info=e,
                )
                continue
            events[event.id] = event
        self._events = events
        logger.info("Events feed loaded.", extra={"event_count": len(events)})
        return list(events.values())

    async def add(self, title: str, event_date: datetime) -> EventEntry:
        """Create an event on the backend, then add it to the list.

        Raises:
            EventCreateError: If the backend call fails or returns an unusable
                row; the list is unchanged.
        """
        try:
            row = await self._backend.insert_event(
                title, event_date, self._context.user_id
            )
            event = event_from_row(row)
        except (BackendError, MalformedRecordError) as e:
            raise EventCreateError("Failed to add event.", title=title) from e

        self._events[event.id] = event
        logger.info("Event added.", extra={"event_id": event.id})
        return event

    async def delete(self, event_id: str) -> None:
        """Delete an event on the backend, then drop it from the list.

        Raises:
            EventDeleteError: If the backend call fails; the list is unchanged.
        """
        try:
            await self._backend.delete_event(event_id)
        except BackendError as e:
            raise EventDeleteError(
                "Failed to delete event.", event_id=event_id
            ) from e

        self._events.pop(event_id, None)
        logger.info("Event deleted.", extra={"event_id": event_id})

    def upcoming(self, now: datetime) -> list[EventEntry]:
        """Events at or after ``now``, soonest first."""
        return sorted(
            (e for e in self._events.values() if e.event_date >= now),
            key=lambda e: e.event_date,
        )

    def past(self, now: datetime) -> list[EventEntry]:
        """Events before ``now``, most recent first."""
        return sorted(
            (e for e in self._events.values() if e.event_date < now),
            key=lambda e: e.event_date,
            reverse=True,
        )
