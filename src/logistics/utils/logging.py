"""Logging configuration for the Logistics domain."""

import logging
import os

import structlog

logger = structlog.get_logger(__name__)

# Suppress noisy library loggers
logging.getLogger("protean").setLevel(logging.WARNING)


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure structlog for the process.

    ``LOG_FORMAT=json`` renders one JSON object per line for log shipping;
    anything else renders human-readable console output.
    """
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    renderer = (
        structlog.processors.JSONRenderer()
        if (fmt or os.environ.get("LOG_FORMAT", "console")) == "json"
        else structlog.dev.ConsoleRenderer()
    )

    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format="%(message)s")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name, logging.INFO)),
        cache_logger_on_first_use=True,
    )
