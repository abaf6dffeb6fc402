from __future__ import annotations

import logging
import sys
from typing import Any

import orjson
import structlog


def _json_serializer(obj: Any, default: Any) -> str:
    """
    JSON serializer for structured logs.

    Context tokens are opaque to the engine, so anything orjson cannot encode
    falls back to str() through `default`.
    """
    return orjson.dumps(obj, default=default).decode("utf-8")


def configure_logging(*, level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configure structured logging for the entire application.

    Call once at process startup (the app factory does this).
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    renderer: Any
    if json_logs:
        renderer = structlog.processors.JSONRenderer(serializer=_json_serializer)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    processors: list[Any] = [
        # session_id, component, ...
        structlog.contextvars.merge_contextvars,

        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),

        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,

        renderer,
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )

    # third-party libraries log through stdlib
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def bind_context(**values: Any) -> None:
    """
    Bind contextual information to all future log entries.

    Example:
        bind_context(session_id="20261019T101500Z_ab12cd34", component="session")
    """
    structlog.contextvars.bind_contextvars(**values)


def clear_context() -> None:
    """
    Clear all bound logging context.
    """
    structlog.contextvars.clear_contextvars()
