"""Events feed endpoints."""

from datetime import UTC, datetime
import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import AwareDatetime, BaseModel, Field

from ...events_feed import ics_filename, to_ics
from ...exceptions import EventCreateError, EventDeleteError
from ...types import EventEntry
from ..dependencies import LibrarySessionDep, require_admin
from ..validation import ValidatedEventId

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events")


class EventsResponse(BaseModel):
    """Upcoming events soonest first and past events most recent first."""

    upcoming: list[EventEntry]
    past: list[EventEntry]


class EventCreateRequest(BaseModel):
    title: str = Field(min_length=1)
    event_date: AwareDatetime


@router.get("", response_model=EventsResponse)
async def list_events(session: LibrarySessionDep) -> EventsResponse:
    now = datetime.now(UTC)
    return EventsResponse(
        upcoming=session.events.upcoming(now),
        past=session.events.past(now),
    )


@router.post(
    "",
    response_model=EventEntry,
    status_code=201,
    dependencies=[Depends(require_admin)],
)
async def add_event(
    request: EventCreateRequest, session: LibrarySessionDep
) -> EventEntry:
    """Add an event.

    Raises:
        HTTPException: 502 if the backend rejects the event.
    """
    try:
        return await session.events.add(request.title.strip(), request.event_date)
    except EventCreateError as e:
        logger.error("Add event failed.", extra={"title": request.title}, exc_info=e)
        raise HTTPException(
            status_code=502, detail="Failed to add event. Please try again."
        ) from e


@router.delete(
    "/{event_id}", status_code=204, dependencies=[Depends(require_admin)]
)
async def delete_event(
    event_id: ValidatedEventId, session: LibrarySessionDep
) -> Response:
    if session.events.get(event_id) is None:
        raise HTTPException(status_code=404, detail="Event not found")
    try:
        await session.events.delete(event_id)
    except EventDeleteError as e:
        logger.error("Delete event failed.", extra={"event_id": event_id}, exc_info=e)
        raise HTTPException(
            status_code=502, detail="Failed to delete event. Please try again."
        ) from e
    return Response(status_code=204)


@router.get("/{event_id}/ics")
async def download_ics(
    event_id: ValidatedEventId, session: LibrarySessionDep
) -> Response:
    """Return the event as an iCalendar attachment."""
    event = session.events.get(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    filename = quote(ics_filename(event))
    return Response(
        content=to_ics(event),
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{filename}"},
    )
