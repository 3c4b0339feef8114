"""Logging configuration and custom formatters for mediafeed.

Provides the log record factory, the session context filter, and the
human-readable formatter used by the console handler. JSON output is
delegated to python-json-logger.
"""

from collections.abc import Mapping
from contextvars import ContextVar
import json
import logging
from logging.config import dictConfig
import sys
from typing import Any, Literal

APP_LOGGER_NAME = "mediafeed"

_original_log_record_factory = logging.getLogRecordFactory()


def custom_record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
    """Create a log record enriched with exception attributes.

    Walks the exception chain of ``exc_info`` (if any), collecting the public
    attributes of every exception (``item_id``, ``operation``, ...) and the
    message of each link so that the formatter can print a compact trace.

    Args:
        *args: Arguments passed to the original log record factory.
        **kwargs: Keyword arguments passed to the original log record factory.

    Returns:
        LogRecord with ``exc_custom_attrs`` and ``semantic_trace`` set when
        an exception is attached.
    """
    record = _original_log_record_factory(*args, **kwargs)

    if not (record.exc_info and record.exc_info[1]):
        return record

    collected_attrs: dict[str, Any] = {}
    chain_messages: list[str] = []

    current_exc: BaseException | None = record.exc_info[1]
    while current_exc:
        for name, val in vars(current_exc).items():
            if not name.startswith("_") and name not in collected_attrs:
                collected_attrs[name] = val
        chain_messages.append(str(current_exc))
        current_exc = current_exc.__cause__ or current_exc.__context__

    if collected_attrs:
        record.exc_custom_attrs = collected_attrs
    if chain_messages:
        record.semantic_trace = chain_messages

    return record


_context_id_var: ContextVar[str | None] = ContextVar("context_id", default=None)


def set_context_id(context_id: str) -> None:
    """Set the context ID for the current async context.

    All records logged from the same context afterwards carry the ID.

    Args:
        context_id: The context identifier (e.g., "session-user_1").
    """
    _context_id_var.set(context_id)


class ContextIdFilter(logging.Filter):
    """Inject the current context_id into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        context_id = _context_id_var.get()
        if context_id is not None:
            record.context_id = context_id
        return True


_should_include_stacktrace: bool = False

_STANDARD_RECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "thread",
        "threadName",
        "context_id",
        "taskName",
        "exc_custom_attrs",
        "semantic_trace",
    }
)


def _format_extra_value(value: Any) -> str:
    if isinstance(value, dict | list | tuple | set | frozenset):
        if isinstance(value, set | frozenset):
            value = sorted(value, key=str)
        return json.dumps(value, sort_keys=True, separators=(", ", ":"), default=str)
    return str(value)


class HumanReadableExtrasFormatter(logging.Formatter):
    """Format records as one human-readable line followed by extras.

    The line carries timestamp, level, logger name, the context ID when set,
    every ``extra=`` field, and the message. Exceptions are rendered either
    as a full stack trace or, by default, as the semantic trace collected by
    :func:`custom_record_factory`.
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: Literal["%", "{", "$"] = "%",
        validate: bool = True,
        *,
        defaults: Mapping[str, Any] | None = None,
    ):
        super().__init__(fmt, datefmt, style, validate, defaults=defaults)

    def _collect_extras(self, record: logging.LogRecord) -> dict[str, Any]:
        combined: dict[str, Any] = {}
        exc_attrs = getattr(record, "exc_custom_attrs", None)
        if isinstance(exc_attrs, dict):
            combined.update(exc_attrs)  # type: ignore
        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_"):
                combined[key] = value
        return combined

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record with human-readable output and extra fields.

        Args:
            record: The log record to format.

        Returns:
            Formatted log message string.
        """
        prefix_parts = [
            self.formatTime(record, self.datefmt),
            record.levelname,
            f"[{record.name}]",
        ]
        ctx_id = getattr(record, "context_id", None)
        if ctx_id is not None:
            prefix_parts.append(f"CtxID:{ctx_id}")

        parts: list[str] = [" ".join(prefix_parts)]

        extra_pairs: list[str] = []
        for key, value in self._collect_extras(record).items():
            try:
                extra_pairs.append(f"{key}:{_format_extra_value(value)}")
            except TypeError:
                extra_pairs.append(f"{key}=[Unserializable Value: {type(value)}]")
        if extra_pairs:
            parts.append(" ".join(extra_pairs))

        message = record.getMessage()
        parts.append(f"- {message}" if message else "-")

        line = " ".join(filter(None, parts))

        if record.exc_info:
            if _should_include_stacktrace:
                if not record.exc_text:
                    record.exc_text = self.formatException(record.exc_info)
                if record.exc_text:
                    line += "\n" + record.exc_text
            else:
                trace: list[str] | None = getattr(record, "semantic_trace", None)
                if trace:
                    line += "\nError: " + trace[0]
                    for msg in trace[1:]:
                        line += f"\n  Caused by: {msg}"

        if record.stack_info:
            line += "\n" + self.formatStack(record.stack_info)

        return line


LOGGING_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "context_id_filter": {
            "()": ContextIdFilter,
        },
    },
    "formatters": {
        "human_readable_formatter": {
            "()": HumanReadableExtrasFormatter,
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "json_formatter": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "console_handler": {
            "class": "logging.StreamHandler",
            "formatter": "human_readable_formatter",
            "stream": "ext://sys.stdout",
            "filters": ["context_id_filter"],
        },
    },
    "loggers": {
        APP_LOGGER_NAME: {
            "handlers": ["console_handler"],
            "level": "INFO",
            "propagate": False,
        },
    },
    "root": {
        "handlers": ["console_handler"],
        "level": "WARNING",
    },
}


def setup_logging(
    log_format_type: Literal["human", "json"],
    app_log_level_name: str,
    include_stacktrace: bool,
) -> None:
    """Configure logging for the application.

    Args:
        log_format_type: Format for logs ('human' or 'json').
        app_log_level_name: Logging level name (e.g., 'INFO', 'DEBUG').
        include_stacktrace: Whether to include full stack traces in error logs.
    """
    global _should_include_stacktrace
    _should_include_stacktrace = include_stacktrace

    logging.setLogRecordFactory(custom_record_factory)

    app_logger_config = LOGGING_CONFIG["loggers"][APP_LOGGER_NAME]
    log_level_upper = app_log_level_name.upper()
    if not isinstance(getattr(logging, log_level_upper, None), int):
        print(
            f"Warning: Invalid LOG_LEVEL '{app_log_level_name}'. Defaulting to INFO.",
            file=sys.stderr,
        )
        app_logger_config["level"] = "INFO"
    else:
        app_logger_config["level"] = log_level_upper

    formatter = (
        "json_formatter"
        if log_format_type.lower() == "json"
        else "human_readable_formatter"
    )
    LOGGING_CONFIG["handlers"]["console_handler"]["formatter"] = formatter

    dictConfig(LOGGING_CONFIG)
