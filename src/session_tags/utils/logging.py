"""Structlog setup: JSON lines in production, coloured console elsewhere."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable

import structlog

DEFAULT_QUIET_LOGGERS: tuple[str, ...] = ("uvicorn.access", "redis")

# Captured parameter values never reach the log output, only their names.
_REDACTED_KEYS = frozenset({"value", "values", "query"})


def redact_parameter_values(
    logger: object, method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Structlog processor masking captured values passed as event fields."""
    for key in _REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "[redacted]"
    return event_dict


def configure_logging(
    environment: str,
    log_level: str = "INFO",
    quiet_loggers: Iterable[str] = DEFAULT_QUIET_LOGGERS,
) -> None:
    """Route structlog and stdlib logging through one stdout handler.

    Production output is newline-delimited JSON for log shipping; any other
    environment gets the colourised development renderer.

    Args:
        environment:   ``"production"`` or anything else (treated as development).
        log_level:     Standard Python log-level name, e.g. ``"DEBUG"``.
        quiet_loggers: Library loggers held at WARNING in production.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        redact_parameter_values,
    ]

    if environment == "production":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

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
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)

    if environment == "production":
        for name in quiet_loggers:
            logging.getLogger(name).setLevel(logging.WARNING)
