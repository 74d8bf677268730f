"""Correlation ID logging context for tracing requests across modules.

Provides a request_id-aware logger that attaches a correlation ID to every
log message, so one availability query or booking commit can be followed
through the engine, the committer and the stores.

Usage:
    from booking_engine.logging_context import get_request_logger, set_request_id

    set_request_id("REQ-abc123")
    logger = get_request_logger(__name__)
    logger.info("Committing booking")  # -> [REQ-abc123] Committing booking
"""

import logging
import uuid
from contextvars import ContextVar

_DEFAULT_REQUEST_ID = "NO_REQUEST_ID"
_request_id: ContextVar[str] = ContextVar("request_id", default=_DEFAULT_REQUEST_ID)


def set_request_id(request_id: str) -> None:
    """Set the correlation ID for the current async context."""
    _request_id.set(request_id)


def get_request_id() -> str:
    """Retrieve the current correlation ID."""
    return _request_id.get()


def new_request_id(prefix: str = "REQ") -> str:
    """Generate a fresh correlation ID and make it current."""
    request_id = f"{prefix}-{uuid.uuid4().hex[:8]}"
    _request_id.set(request_id)
    return request_id


def ensure_request_id(prefix: str = "REQ") -> str:
    """Keep the caller's correlation ID if one is set, otherwise create one."""
    current = _request_id.get()
    if current != _DEFAULT_REQUEST_ID:
        return current
    return new_request_id(prefix)


class RequestIdFilter(logging.Filter):
    """Injects request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    """Return a logger with the RequestIdFilter attached.

    The filter adds ``request_id`` to each record so formatters can
    include ``%(request_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger
