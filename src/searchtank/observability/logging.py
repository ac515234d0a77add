"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import sys
from typing import IO, TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from searchtank.config.settings import ObservabilitySettings

_HANDLER_NAME = "searchtank"


def setup_logging(settings: ObservabilitySettings | None = None, stream: IO[str] | None = None) -> None:
    """Configure structured logging for SearchTank.

    Reindex progress and lifecycle failures are emitted through the standard
    ``logging`` module. A root handler formats those records with the same
    processors and renderer as structlog loggers, so both come out as one
    JSON object (or console line) per event.

    Calling this again replaces the handler installed by the previous call.

    Args:
        settings: Observability settings. Uses defaults if None.
        stream: Where log lines go. Defaults to stdout.
    """
    log_level = getattr(settings, "log_level", "info").upper() if settings else "INFO"
    log_format = getattr(settings, "log_format", "json") if settings else "json"

    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level, logging.INFO))
