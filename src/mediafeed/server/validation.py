"""Input validation utilities for FastAPI endpoints."""

from typing import Annotated

from fastapi import Path

SAFE_ID_PATTERN = r"^[a-zA-Z0-9_-]{1,255}$"

ValidatedItemId = Annotated[
    str,
    Path(
        description="Catalog item identifier",
        pattern=SAFE_ID_PATTERN,
        min_length=1,
        max_length=255,
    ),
]

ValidatedCommentId = Annotated[
    str,
    Path(
        description="Comment identifier",
        pattern=SAFE_ID_PATTERN,
        min_length=1,
        max_length=255,
    ),
]

ValidatedEventId = Annotated[
    str,
    Path(
        description="Event identifier",
        pattern=SAFE_ID_PATTERN,
        min_length=1,
        max_length=255,
    ),
]

ValidatedNotificationId = Annotated[
    str,
    Path(
        description="Notification identifier",
        pattern=SAFE_ID_PATTERN,
        min_length=1,
        max_length=255,
    ),
]
