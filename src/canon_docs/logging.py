"""
Logging configuration.

Provides a single entry point for configuring structured logging.
Supports environment-based configuration for:
- Log level (DEBUG, INFO, WARNING, ERROR)
- Output format (json, console)

Configuration is read from settings or environment variables:
- CANON_DOCS_LOG_LEVEL: DEBUG | INFO | WARNING | ERROR (default: INFO)
- CANON_DOCS_LOG_FORMAT: json | console (default: console)

Usage:
    from canon_docs.logging import configure_logging, get_logger

    configure_logging(level="DEBUG")
    log = get_logger(__name__)
    log.info("discovery.found", count=12)
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, Literal

import structlog
from structlog.types import Processor

# Track if logging has been configured
_configured = False


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | str | None = None,
    format: Literal["json", "console"] | str | None = None,
    force: bool = False,
) -> None:
    """
    Configure structured logging for the generator.

    Should be called once at startup (CLI entry).
    Subsequent calls are no-ops unless force=True.

    Args:
        level: Log level (overrides CANON_DOCS_LOG_LEVEL env var)
        format: Output format (overrides CANON_DOCS_LOG_FORMAT env var)
        force: Reconfigure even if already configured
    """
    global _configured

    if _configured and not force:
        return

    log_level = (level or os.environ.get("CANON_DOCS_LOG_LEVEL", "INFO")).upper()
    log_format = (format or os.environ.get("CANON_DOCS_LOG_FORMAT", "console")).lower()
    numeric_level = getattr(logging, log_level, logging.INFO)

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
        structlog.processors.StackInfoRenderer(),
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # stdlib logging carries the rendered lines to stderr
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
        force=True,
    )
    logging.getLogger("canon_docs").setLevel(numeric_level)

    _configured = True


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger for ``name`` (typically ``__name__``)."""
    return structlog.get_logger(name)
