"""Realtime change ingestion.

The backend's database webhook posts every change of the catalog table
here; accepted changes are queued on the session's event channel.
"""

import logging
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from ..dependencies import LibrarySessionDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/hooks")


class ChangeAcceptedResponse(BaseModel):
    accepted: bool


@router.post(
    "/catalog-changes", response_model=ChangeAcceptedResponse, status_code=202
)
async def catalog_changes(
    payload: dict[str, Any], session: LibrarySessionDep
) -> ChangeAcceptedResponse:
    """Queue one catalog change; malformed payloads are dropped.

    Args:
        payload: Webhook body with ``type``, ``table``, ``record`` and
            ``old_record``.
        session: The library session.

    Returns:
        Whether the change was queued for reconciliation.
    """
    accepted = session.ingest_change(payload)
    logger.debug(
        "Catalog change received.",
        extra={"event_type": payload.get("type"), "accepted": accepted},
    )
    return ChangeAcceptedResponse(accepted=accepted)
