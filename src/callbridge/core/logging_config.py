"""Logging setup: text or one JSON object per line, tagged with call context."""
from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Optional

TEXT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Identifiers lifted to top-level JSON keys, from the record or its extra_data
CONTEXT_FIELDS = ("request_id", "call_sid", "ultravox_call_id")

NO_REQUEST = "-"

# Twilio logs full request bodies at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "urllib3", "twilio.http_client")

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def bind_request_id(request_id: str) -> Token:
    """Attach `request_id` to every record logged in the current context."""
    return _request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    _request_id.reset(token)


def current_request_id() -> Optional[str]:
    return _request_id.get()


class RequestContextFilter(logging.Filter):
    """Stamps records with the request id bound by the HTTP middleware."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = _request_id.get() or NO_REQUEST
        return True


class JSONFormatter(logging.Formatter):
    """
    Structured formatter for hosted log search (Render, Vercel).

    Call identifiers become top-level keys so a single call can be followed
    from the inbound request through Ultravox and Twilio. Everything else in
    `extra_data` is kept under "data".
    """

    def format(self, record: logging.LogRecord) -> str:
        extra_data: Dict[str, Any] = dict(getattr(record, "extra_data", None) or {})
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for name in CONTEXT_FIELDS:
            from_extra = extra_data.pop(name, None)
            value = getattr(record, name, None) or from_extra
            if value and value != NO_REQUEST:
                entry[name] = value

        if extra_data:
            entry["data"] = extra_data
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class ContextLogger(logging.LoggerAdapter):
    """
    Adapter that adds fixed context (usually `call_sid`) to each record.

    Usage:
        logger = get_context_logger(__name__, call_sid="CA123")
        logger.info("Call placed")
    """

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple[str, Dict[str, Any]]:
        kwargs["extra"] = {**(kwargs.get("extra") or {}), **self.extra}
        return msg, kwargs


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """
    Configure root logging on stdout.

    Args:
        level: Logging level name.
        json_format: Emit one JSON object per line instead of text.
    """
    handler = logging.StreamHandler(sys.stdout)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_LOG_FORMAT, DATE_FORMAT))
    handler.addFilter(RequestContextFilter())

    logging.basicConfig(level=level, handlers=[handler], force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def get_context_logger(name: str, **context: Any) -> ContextLogger:
    """Logger whose records all carry `context` (e.g. call_sid="CA...")."""
    return ContextLogger(logging.getLogger(name), context)


def log_external_call(
    logger: logging.Logger,
    service: str,
    operation: str,
    success: bool,
    duration_ms: float,
    **extra: Any,
) -> None:
    """
    Record one request to Twilio, Ultravox or GoHighLevel.

    Successful calls log at INFO, failures at WARNING; the caller raises the
    matching ProviderError itself.

    Args:
        logger: Logger of the calling module.
        service: "twilio", "ultravox" or "gohighlevel".
        operation: Client method name, e.g. "create_session".
        success: Whether the provider accepted the request.
        duration_ms: Wall time of the request.
        **extra: Identifiers and status codes (ultravox_call_id, status_code, ...).
    """
    outcome = "ok" if success else "failed"
    logger.log(
        logging.INFO if success else logging.WARNING,
        f"{service}.{operation} {outcome} in {duration_ms:.0f}ms",
        extra={"extra_data": {
            "service": service,
            "operation": operation,
            "success": success,
            "duration_ms": round(duration_ms, 2),
            **extra,
        }},
    )


__all__ = [
    "setup_logging",
    "get_logger",
    "get_context_logger",
    "log_external_call",
    "bind_request_id",
    "reset_request_id",
    "current_request_id",
    "JSONFormatter",
    "ContextLogger",
    "RequestContextFilter",
    "CONTEXT_FIELDS",
]
