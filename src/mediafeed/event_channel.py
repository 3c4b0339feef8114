"""Realtime change subscription.

The backend pushes row changes as database-webhook payloads
(``{"type", "table", "record", "old_record"}``). :func:`parse_change_payload`
turns one payload into a :data:`~mediafeed.types.RemoteEvent`, and
:class:`EventChannel` carries the events to the reconciler as a cancellable
async sequence.
"""

import asyncio
from collections.abc import AsyncGenerator
import logging
from typing import Any

from .backend.records import item_fields_from_row, item_from_row
from .backend.rest_backend import ITEMS_TABLE
from .exceptions import MalformedEventError, MalformedRecordError
from .types import ItemInserted, ItemUpdated, RemoteEvent

logger = logging.getLogger(__name__)


def _changed_fields(
    record: dict[str, Any], old_record: dict[str, Any]
) -> dict[str, Any]:
    """Return the item fields whose value differs between the two rows.

    A field absent from ``old_record`` counts as changed.
    """
    new_fields = item_fields_from_row(record)
    old_fields = item_fields_from_row(old_record)
    return {
        name: value
        for name, value in new_fields.items()
        if name != "id" and (name not in old_fields or old_fields[name] != value)
    }


def parse_change_payload(payload: dict[str, Any]) -> RemoteEvent:
    """Translate a change payload into a remote event.

    Args:
        payload: Webhook body with ``type``, ``table``, ``record`` and
            ``old_record`` keys.

    Returns:
        ``ItemInserted`` for an INSERT, ``ItemUpdated`` carrying only the
        changed fields for an UPDATE.

    Raises:
        MalformedEventError: If the payload is not a well-formed insert or
            update of a catalog row.
    """
    event_type = payload.get("type")
    if not isinstance(event_type, str):
        raise MalformedEventError("Change payload has no type.")
    event_type = event_type.upper()

    table = payload.get("table")
    if table is not None and table != ITEMS_TABLE:
        raise MalformedEventError(
            f"Change payload is for unsupported table '{table}'.",
            event_type=event_type,
        )

    record = payload.get("record")
    if not isinstance(record, dict):
        raise MalformedEventError(
            "Change payload has no record.", event_type=event_type
        )
    record_id = record.get("id")
    item_id = str(record_id) if record_id is not None else None

    match event_type:
        case "INSERT":
            try:
                item = item_from_row(record)
            except MalformedRecordError as e:
                raise MalformedEventError(
                    "Inserted record cannot be mapped to a catalog item.",
                    event_type=event_type,
                    item_id=item_id,
                ) from e
            return ItemInserted(item=item)
        case "UPDATE":
            if item_id is None:
                raise MalformedEventError(
                    "Updated record has no id.", event_type=event_type
                )
            old_record = payload.get("old_record")
            if not isinstance(old_record, dict):
                old_record = {}
            fields = _changed_fields(record, old_record)
            if "views" in fields:
                views = fields["views"]
                if isinstance(views, bool) or not isinstance(views, int) or views < 0:
                    raise MalformedEventError(
                        f"Updated record has an invalid view count: {views!r}",
                        event_type=event_type,
                        item_id=item_id,
                    )
            return ItemUpdated(item_id=item_id, fields=fields)
        case _:
            raise MalformedEventError(
                f"Unsupported change type '{event_type}'.",
                event_type=event_type,
                item_id=item_id,
            )


class EventChannel:
    """Single-consumer async sequence of remote events.

    Producers call :meth:`publish`; the consumer iterates with ``async for``.
    :meth:`close` ends the iteration once queued events are drained. A
    channel whose producer stops publishing simply blocks the consumer until
    it is closed or the consuming task is cancelled.

    Attributes:
        _queue: Pending events; ``None`` marks the end of the stream.
        _closed: Whether the channel was closed.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[RemoteEvent | None] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, event: RemoteEvent) -> bool:
        """Queue ``event`` for the consumer.

        Returns:
            False if the channel is closed and the event was discarded.
        """
        if self._closed:
            logger.debug("Event published to closed channel; discarded.")
            return False
        self._queue.put_nowait(event)
        return True

    def publish_payload(self, payload: dict[str, Any]) -> bool:
        """Parse a change payload and queue the resulting event.

        Malformed payloads are logged and dropped.

        Returns:
            True if an event was queued.
        """
        try:
            event = parse_change_payload(payload)
        except MalformedEventError as e:
            logger.warning(
                "Dropping malformed change payload.",
                extra={"event_type": e.event_type, "item_id": e.item_id},
                exc_info=e,
            )
            return False
        return self.publish(event)

    def close(self) -> None:
        """End the sequence after the already queued events."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)

    async def __aiter__(self) -> AsyncGenerator[RemoteEvent]:
        while True:
            event = await self._queue.get()
            if event is None:
                return
            yield event
