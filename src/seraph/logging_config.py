"""
Structured logging configuration using structlog.

This module sets up structlog for JSON-based structured logging with context binding.
"""

import logging
import sys
from typing import Optional, TextIO

import structlog

from .config import settings


def setup_logging(json_output: Optional[bool] = None, stream: Optional[TextIO] = None) -> None:
    """
    Configure structlog for structured logging.

    Sets up processors for:
    - Context variable merging (request ids from the API middleware)
    - Log level addition
    - Exception info rendering
    - Timestamp addition
    - JSON or console rendering

    Args:
        json_output: Render JSON lines (default: settings.log_json)
        stream: Output stream (default: stdout). The CLI logs to stderr so
            its JSON result on stdout stays parseable.
    """
    if json_output is None:
        json_output = settings.log_json

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_output:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(settings.log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stdout),
        cache_logger_on_first_use=True,
    )
