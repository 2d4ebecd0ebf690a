"""Process-wide logging setup for the Partitura API.

Records are rendered as one console line each: UTC timestamp, level, logger,
the request correlation ID and any ``extra`` fields as ``key=value`` pairs.
Feature code logs dotted event names (``sheets.create.success``) and passes
identifiers through :func:`log_context`.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from partitura_api.settings import Settings

_CORRELATION_ID: ContextVar[str | None] = ContextVar("partitura_correlation_id", default=None)

# Everything a bare LogRecord carries, plus attributes added by formatters and uvicorn.
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
    "correlation_id",
    "taskName",
    "color_message",
}

# Third-party loggers that should flow through the root handler only.
_PROPAGATED_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "alembic",
    "alembic.runtime.migration",
    "sqlalchemy",
)

_IDENTIFIER_KEYS = ("sheet_id", "user_id", "owner_id")

_HANDLER_NAME = "partitura-console"


class ConsoleLogFormatter(logging.Formatter):
    """Single-line formatter.

    ``2026-03-02T10:14:03.512Z INFO  partitura_api.features.sheets.service
    [cid=9f1c] sheets.create.success sheet_id=12 owner_id=3``
    """

    default_time_format = "%Y-%m-%dT%H:%M:%S"

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-5s %(name)s [cid=%(correlation_id)s] %(message)s",
            datefmt=self.default_time_format,
        )

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=UTC).strftime(
            datefmt or self.default_time_format
        )
        return f"{stamp}.{int(record.msecs):03d}Z"

    def format(self, record: logging.LogRecord) -> str:
        record.correlation_id = (
            getattr(record, "correlation_id", None) or _CORRELATION_ID.get() or "-"
        )
        line = super().format(record)
        pairs = " ".join(
            f"{key}={_render(value)}"
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        )
        return f"{line} {pairs}" if pairs else line


def setup_logging(settings: Settings) -> None:
    """Install the console handler on the root logger and apply the level.

    Safe to call repeatedly (every ``create_app``); the handler is only
    installed once and later calls just update the level.
    """
    root = logging.getLogger()
    root.setLevel(logging.getLevelName(settings.logging_level.upper()))

    if any(handler.get_name() == _HANDLER_NAME for handler in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(ConsoleLogFormatter())
    root.handlers = [handler]

    for name in _PROPAGATED_LOGGERS:
        third_party = logging.getLogger(name)
        third_party.handlers.clear()
        third_party.propagate = True


def bind_request_context(correlation_id: str | None) -> None:
    _CORRELATION_ID.set(correlation_id)


def clear_request_context() -> None:
    _CORRELATION_ID.set(None)


def current_correlation_id() -> str | None:
    return _CORRELATION_ID.get()


def log_context(**fields: Any) -> dict[str, Any]:
    """Return an ``extra`` mapping; unset sheet/user/owner identifiers are left out."""
    return {
        key: value
        for key, value in fields.items()
        if not (key in _IDENTIFIER_KEYS and value is None)
    }


def _render(value: Any) -> str:
    return "null" if value is None else str(value)


__all__ = [
    "ConsoleLogFormatter",
    "bind_request_context",
    "clear_request_context",
    "current_correlation_id",
    "log_context",
    "setup_logging",
]
