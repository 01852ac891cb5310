"""Structured logging configuration.

Every module logs through structlog as JSON lines on stderr, which keeps
command results on stdout machine-readable.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from core.errors import CatalogConfigError

LOG_LEVELS = ("debug", "info", "warning", "error")

_state = {"configured": False}


def configure_logging(level: str = "info") -> None:
    """Configure JSON log output at a minimum level.

    Args:
        level: One of ``LOG_LEVELS``.

    Raises:
        CatalogConfigError: If the level name is unknown.
    """
    if level not in LOG_LEVELS:
        raise CatalogConfigError(
            f"Unsupported log level '{level}'. Use one of: {', '.join(LOG_LEVELS)}."
        )
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper())),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )
    _state["configured"] = True


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger bound to the module name.
    """
    if not _state["configured"]:
        configure_logging()
    return structlog.get_logger(name)


def _stderr_logger(*_args: Any) -> structlog.PrintLogger:
    # Resolve sys.stderr per call so redirected streams are honored.
    return structlog.PrintLogger(file=sys.stderr)
