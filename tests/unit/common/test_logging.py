from __future__ import annotations

import logging

from partitura_api.common.logging import (
    ConsoleLogFormatter,
    bind_request_context,
    clear_request_context,
    current_correlation_id,
    log_context,
)


def _record(message: str, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="partitura_api.features.sheets.service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_log_context_drops_unset_identifiers() -> None:
    assert log_context(sheet_id=3, user_id=None, listing="public") == {
        "sheet_id": 3,
        "listing": "public",
    }


def test_formatter_renders_extras_as_key_value_pairs() -> None:
    line = ConsoleLogFormatter().format(
        _record("sheets.create.success", **log_context(sheet_id=12, owner_id=3))
    )

    assert "INFO " in line
    assert "partitura_api.features.sheets.service" in line
    assert "[cid=-]" in line
    assert line.endswith("sheets.create.success sheet_id=12 owner_id=3")


def test_formatter_uses_bound_correlation_id() -> None:
    bind_request_context("abc123")
    try:
        assert current_correlation_id() == "abc123"
        line = ConsoleLogFormatter().format(_record("request.complete"))
    finally:
        clear_request_context()

    assert "[cid=abc123]" in line
    assert current_correlation_id() is None


def test_formatter_timestamp_is_utc_with_milliseconds() -> None:
    record = _record("health.status")
    record.created = 0.0
    record.msecs = 7.0

    line = ConsoleLogFormatter().format(record)

    assert line.startswith("1970-01-01T00:00:00.007Z")
