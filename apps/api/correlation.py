"""
Request correlation IDs and structured event logging.

What is a correlation ID?
------------------------
A unique identifier attached to a request. Every log line written while handling
that request carries it, so one search in the log tool shows everything the request did.

Implementation approach
-----------------------
The ID lives in a `contextvars.ContextVar` set by the HTTP middleware. Route helpers
and error handlers read it without it being passed around explicitly.

Event log lines are JSON objects (one per line) with a stable `event` field,
which keeps them easy to parse in log tooling.
"""

from __future__ import annotations

import json
import logging
from contextvars import ContextVar
from typing import Any
from uuid import UUID

# The current request's correlation ID (if any).
_correlation_id_var: ContextVar[UUID | None] = ContextVar("correlation_id", default=None)


def set_correlation_id(correlation_id: UUID) -> None:
    """Set the correlation_id for the current request context."""

    _correlation_id_var.set(correlation_id)


def get_correlation_id() -> UUID | None:
    """Get the correlation_id for the current request context (or None)."""

    return _correlation_id_var.get()


def log_event(
    logger: logging.Logger,
    event: str,
    *,
    level: int = logging.INFO,
    exc_info: Any = None,
    **fields: Any,
) -> None:
    """Write one JSON log line for `event`, tagged with the current correlation ID."""

    correlation_id = get_correlation_id()
    payload = {
        "event": event,
        **fields,
        "correlation_id": str(correlation_id) if correlation_id else None,
    }
    logger.log(level, json.dumps(payload, default=str), exc_info=exc_info)
