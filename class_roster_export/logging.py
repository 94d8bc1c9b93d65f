"""structlog setup shared by the parser and the CLI."""
from __future__ import annotations

import logging
import sys

import structlog


def setup_logging(json_output: bool = False, log_level: str = "INFO") -> None:
    """
    Route parser events (roster_parsed, roster_rejected) to stderr.

    :param json_output: JSON lines instead of the coloured console renderer.
    :param log_level: Threshold name; unknown names fall back to INFO.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()

    # stdout is reserved for the roster summary and --list-students output
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
