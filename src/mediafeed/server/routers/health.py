"""Health check router for the mediafeed HTTP server."""

from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel

from ..dependencies import LibrarySessionDep

router = APIRouter(prefix="/api")


class HealthResponse(BaseModel):
    """Response model for health check endpoint.

    Attributes:
        status: Health status of the service.
        timestamp: Current server timestamp.
        service: Name of the service.
        version: Version of the service.
        item_count: Number of catalog items held in memory.
    """

    status: Literal["healthy", "degraded", "unhealthy"]
    timestamp: datetime
    service: str
    version: str
    item_count: int


@router.get("/health", response_model=HealthResponse)
async def health_check(session: LibrarySessionDep) -> HealthResponse:
    """Report service health and the size of the in-memory catalog."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        service="mediafeed",
        version="0.1.0",
        item_count=len(session.store),
    )
