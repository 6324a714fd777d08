"""
Logging configuration using structlog for structured logging.

This module provides centralized logging setup for every action, with
JSON output for log collectors and a console renderer for humans reading
the raw workflow log.
"""

from typing import Any

import structlog


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Configure structured logging.

    Sets up structlog with a pipeline of processors for structured logs
    that include timestamps, log levels, stack traces, and contextual information.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render JSON lines when True, colourless console lines otherwise
    """
    renderer: Any = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level.upper()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_run_context(action: str, **context: Any) -> None:
    """Tag every subsequent log line of this run with ``action`` and ``context``.

    Example:
        >>> bind_run_context("release", dry_run=True)
        >>> log.info("tag_created")  # {"action": "release", "dry_run": true, ...}
    """
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(action=action, **context)
