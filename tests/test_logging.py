"""Tests for structured logging and call context."""
from __future__ import annotations

import json
import logging

from callbridge.core.logging_config import (
    JSONFormatter,
    RequestContextFilter,
    bind_request_id,
    get_context_logger,
    log_external_call,
    reset_request_id,
)


class _Capture(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records: list[logging.LogRecord] = []
        self.addFilter(RequestContextFilter())

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


def _logger(name: str) -> tuple[logging.Logger, _Capture]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    handler = _Capture()
    logger.handlers = [handler]
    return logger, handler


def _as_json(record: logging.LogRecord) -> dict:
    return json.loads(JSONFormatter().format(record))


def test_external_call_ids_become_top_level_fields():
    logger, handler = _logger("callbridge.test.external")

    log_external_call(
        logger, "ultravox", "create_session", True, 12.3456,
        ultravox_call_id="uv-1", status_code=201,
    )

    entry = _as_json(handler.records[0])
    assert entry["level"] == "INFO"
    assert entry["ultravox_call_id"] == "uv-1"
    assert entry["data"]["status_code"] == 201
    assert entry["data"]["duration_ms"] == 12.35
    assert "ultravox_call_id" not in entry["data"]
    assert "request_id" not in entry


def test_failed_external_call_logs_warning():
    logger, handler = _logger("callbridge.test.failed")

    log_external_call(logger, "gohighlevel", "add_tag", False, 5.0)

    assert handler.records[0].levelno == logging.WARNING
    assert "gohighlevel.add_tag failed" in handler.records[0].getMessage()


def test_request_id_bound_to_records():
    logger, handler = _logger("callbridge.test.request")

    token = bind_request_id("req-7")
    try:
        logger.info("inside request")
    finally:
        reset_request_id(token)
    logger.info("outside request")

    assert _as_json(handler.records[0])["request_id"] == "req-7"
    assert handler.records[1].request_id == "-"
    assert "request_id" not in _as_json(handler.records[1])


def test_context_logger_adds_call_sid():
    _, handler = _logger("callbridge.test.context")
    logger = get_context_logger("callbridge.test.context", call_sid="CA123")

    logger.info("Call placed")

    assert _as_json(handler.records[0])["call_sid"] == "CA123"


def test_context_logger_leaves_caller_extra_untouched():
    _logger("callbridge.test.untouched")
    logger = get_context_logger("callbridge.test.untouched", call_sid="CA123")
    extra = {"extra_data": {"to": "+15551234567"}}

    logger.info("Call placed", extra=extra)

    assert extra == {"extra_data": {"to": "+15551234567"}}
