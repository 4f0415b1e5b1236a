"""Structured logging helpers shared by the console gateway."""

from __future__ import annotations

import contextvars
import json
import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

_CORRELATION_ID_CTX: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id", default=None
)
_OPERATION_CTX: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "operation", default=None
)
_CONFIGURED_SERVICES: set[str] = set()


class CorrelationIdFilter(logging.Filter):
    """Inject correlation identifiers into log records."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self._service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self._service_name
        record.correlation_id = _CORRELATION_ID_CTX.get()
        record.operation = _OPERATION_CTX.get()
        return True


class JsonLogFormatter(logging.Formatter):
    """Format log records as JSON with a consistent schema."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self._service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "service": getattr(record, "service", self._service_name),
            "message": record.getMessage(),
        }
        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            payload["correlation_id"] = correlation_id
        operation = getattr(record, "operation", None)
        if operation:
            payload["operation"] = operation
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info

        reserved = _reserved_log_keys()
        for key, value in record.__dict__.items():
            if key in reserved or key in payload:
                continue
            try:
                json.dumps(value)
                payload[key] = value
            except TypeError:
                payload[key] = str(value)
        return json.dumps(payload, default=str)


def _reserved_log_keys() -> set[str]:
    return {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
    }


@contextmanager
def operation_scope(name: str, *, correlation_id: str | None = None) -> Iterator[str]:
    """Bind a correlation identifier to every log line emitted inside the block.

    Nested scopes keep the outer correlation identifier so a composite
    operation (e.g. a trigger update fanning out to several writes) shares a
    single id across all of its log records.
    """

    current = _CORRELATION_ID_CTX.get()
    resolved = correlation_id or current or uuid.uuid4().hex
    token_corr = _CORRELATION_ID_CTX.set(resolved)
    token_op = _OPERATION_CTX.set(name)
    try:
        yield resolved
    finally:
        _OPERATION_CTX.reset(token_op)
        _CORRELATION_ID_CTX.reset(token_corr)


def configure_logging(service_name: str, level: str | int = logging.INFO) -> None:
    """Configure structured logging for the current process."""

    if service_name in _CONFIGURED_SERVICES:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(JsonLogFormatter(service_name))
    handler.addFilter(CorrelationIdFilter(service_name))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    # httpx logs every request at INFO
    for logger_name in ("httpx", "httpcore"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    _CONFIGURED_SERVICES.add(service_name)


def get_correlation_id() -> Optional[str]:
    """Return the correlation identifier for the active operation."""

    return _CORRELATION_ID_CTX.get()


def get_operation() -> Optional[str]:
    """Return the name of the active operation scope, if any."""

    return _OPERATION_CTX.get()
