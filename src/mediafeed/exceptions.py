"""Custom exceptions for the mediafeed application.

This module defines all custom exception classes used throughout the
application, organized by functional area. Identifying attributes are
stored on the exception instance so the log formatter can surface them.
"""

from typing import Any


class MediaFeedError(Exception):
    """Base class for application-specific errors."""


class ConfigLoadError(MediaFeedError):
    """Raised when a configuration file fails to load.

    Attributes:
        config_file: Path to the configuration file that failed to load.
    """

    def __init__(
        self,
        message: str,
        config_file: str | None = None,
    ):
        super().__init__(message)
        self.config_file = config_file


# --- Backend collaborator ---


class BackendError(MediaFeedError):
    """Raised when a call to the backend collaborator fails.

    Covers transport failures as well as error statuses returned by the
    backend.

    Attributes:
        operation: Short name of the backend operation (e.g. "insert item").
        item_id: The catalog item identifier associated with the call.
        status_code: HTTP status code returned by the backend, if any.
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        item_id: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.item_id = item_id
        self.status_code = status_code


class MalformedRecordError(MediaFeedError):
    """Raised when a backend row cannot be mapped to a domain object.

    Attributes:
        field_name: The missing or invalid field.
        actual_value: The offending value, if present.
    """

    def __init__(
        self,
        message: str,
        field_name: str,
        actual_value: Any = None,
    ):
        super().__init__(message)
        self.field_name = field_name
        self.actual_value = actual_value


# --- Realtime events ---


class MalformedEventError(MediaFeedError):
    """Raised when a remote change payload cannot be turned into an event.

    Attributes:
        event_type: The change type carried by the payload, if any.
        item_id: The catalog item identifier, if it could be read.
    """

    def __init__(
        self,
        message: str,
        event_type: str | None = None,
        item_id: str | None = None,
    ):
        super().__init__(message)
        self.event_type = event_type
        self.item_id = item_id


# --- User-surfaced mutation failures ---


class MutationError(MediaFeedError):
    """Base class for mutations whose failure is shown to the user."""


class ItemCreateError(MutationError):
    """Raised when the backend refuses or fails to create a catalog item.

    Attributes:
        title: Title of the item that could not be created.
    """

    def __init__(self, message: str, title: str | None = None):
        super().__init__(message)
        self.title = title


class ItemDeleteError(MutationError):
    """Raised when the backend refuses or fails to delete a catalog item.

    Attributes:
        item_id: The catalog item identifier.
    """

    def __init__(self, message: str, item_id: str | None = None):
        super().__init__(message)
        self.item_id = item_id


class EventCreateError(MutationError):
    """Raised when an entry cannot be added to the events feed.

    Attributes:
        title: Title of the event that could not be created.
    """

    def __init__(self, message: str, title: str | None = None):
        super().__init__(message)
        self.title = title


class EventDeleteError(MutationError):
    """Raised when an entry cannot be removed from the events feed.

    Attributes:
        event_id: The event identifier.
    """

    def __init__(self, message: str, event_id: str | None = None):
        super().__init__(message)
        self.event_id = event_id


class CommentError(MutationError):
    """Raised when a comment operation fails.

    Attributes:
        item_id: The catalog item the comment belongs to.
        comment_id: The comment identifier, for edits and deletions.
    """

    def __init__(
        self,
        message: str,
        item_id: str | None = None,
        comment_id: str | None = None,
    ):
        super().__init__(message)
        self.item_id = item_id
        self.comment_id = comment_id


class InvalidMediaUrlError(MediaFeedError):
    """Raised when no external media reference can be read from a URL.

    Attributes:
        url: The URL supplied by the user.
    """

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


# --- Local persistence ---


class DatabaseOperationError(MediaFeedError):
    """Raised when a local database operation fails.

    Attributes:
        item_id: The catalog item identifier associated with the error.
    """

    def __init__(
        self,
        message: str,
        item_id: str | None = None,
    ):
        super().__init__(message)
        self.item_id = item_id


class NotFoundError(MediaFeedError):
    """Raised when a record is not found when expected."""
