"""Structured logging setup with structlog and refresh IDs.

Supports two output modes:
- "json": Machine-readable JSON lines (for scheduled refresh jobs)
- "console": Human-readable colored output (for interactive use)

Every snapshot build runs under a refresh ID held in a contextvar and
injected into each log entry, so the per-symbol warnings of one refresh
can be grouped together.
"""

from __future__ import annotations

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

import structlog

_refresh_id: ContextVar[str] = ContextVar("refresh_id", default="")


def new_refresh_id() -> str:
    """Generate a short random refresh ID."""
    return uuid.uuid4().hex[:12]


def get_refresh_id() -> str:
    """Get the refresh ID for the current context."""
    return _refresh_id.get()


@contextmanager
def refresh_scope(rid: str | None = None) -> Iterator[str]:
    """Run a block under its own refresh ID.

    A fresh ID is generated unless one is given. The ID that was current
    before the block is restored on exit, even when the block raises.
    """
    rid = rid or new_refresh_id()
    token = _refresh_id.set(rid)
    try:
        yield rid
    finally:
        _refresh_id.reset(token)


def _add_refresh_id(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Inject refresh_id into every log entry."""
    rid = get_refresh_id()
    if rid:
        event_dict["refresh_id"] = rid
    return event_dict


def setup_logging(level: str = "INFO", log_format: str = "console") -> None:
    """Configure structlog for the monitor.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Output format - "json" for jobs, "console" for terminals.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _add_refresh_id,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    # stderr keeps stdout free for command output.
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))
