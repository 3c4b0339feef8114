"""Timezone-aware datetime column type for SQLite."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import DateTime, TypeDecorator

SQLITE_DATETIME_NOW = "datetime('now', 'utc')"


class TimezoneAwareDatetime(TypeDecorator[datetime]):
    """Store aware datetimes as naive UTC and read them back as aware UTC.

    SQLite has no timezone support, so naive values are rejected on write
    and every value read is tagged with UTC.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(
        self, value: datetime | None, dialect: Any
    ) -> datetime | None:
        """Convert an aware datetime to naive UTC for storage.

        Raises:
            TypeError: If the datetime is naive.
        """
        if value is None:
            return None
        if not value.tzinfo or value.tzinfo.utcoffset(value) is None:
            raise TypeError("tzinfo is required")
        return value.astimezone(UTC).replace(tzinfo=None)

    def process_result_value(
        self, value: datetime | None, dialect: Any
    ) -> datetime | None:
        """Tag a stored naive UTC datetime with UTC."""
        if value is None:
            return None
        return value.replace(tzinfo=UTC)
