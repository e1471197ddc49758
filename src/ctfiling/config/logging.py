"""Structured logging configuration for ctfiling."""

import logging
import os
import sys
from typing import Literal, Optional

import structlog

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]

DEFAULT_LOG_LEVEL: LogLevel = "WARNING"


def configure_logging(
    level: Optional[str] = None,
    format: Optional[LogFormat] = None,
) -> None:
    """Configure structured logging for the application.

    Log records go to stderr so that command output on stdout stays clean.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to the
            CTFILING_LOG_LEVEL environment variable, then WARNING.
        format: Output format (json or console). Defaults to console.
    """
    log_level = (level or os.environ.get("CTFILING_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        log_level = DEFAULT_LOG_LEVEL
    log_format = format or "console"

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level),
        force=True,
    )

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=False,
            exception_formatter=structlog.dev.plain_traceback,
        )

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
