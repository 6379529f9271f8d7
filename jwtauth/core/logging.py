"""Structured logging setup with request correlation and secret redaction."""

from __future__ import annotations

import logging
import uuid
from typing import Any

import structlog

REQUEST_ID_HEADER = "X-Request-ID"

REDACTED = "***"
_REDACTED_KEYS = ("password", "secret", "token", "authorization")


def redact_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Replace credential-looking values before rendering; nothing of them is kept."""
    for key in list(event_dict):
        if key == "event":
            continue
        if any(marker in key.lower() for marker in _REDACTED_KEYS) and event_dict[key] is not None:
            event_dict[key] = REDACTED
    return event_dict


def configure_logging(level: str = "INFO", *, json_output: bool = True) -> None:
    """Configure structlog for the process.

    Args:
        level: stdlib level name (DEBUG, INFO, WARNING, ERROR)
        json_output: JSON lines when True, colourless console output otherwise
    """
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
    ]
    if json_output:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=False)]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    return structlog.get_logger(name)


def bind_request_id(request_id: str | None = None) -> str:
    """Bind a correlation id for the current request context and return it."""
    rid = request_id or str(uuid.uuid4())
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=rid)
    return rid


def clear_request_id() -> None:
    structlog.contextvars.clear_contextvars()
