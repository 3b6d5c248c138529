"""
Structured logging configuration using structlog.

Every OrgPulse log line carries the service name and version so lines from
the API, the CLI and background jobs can be told apart once aggregated.
Request-scoped context (request id, path) is merged in from contextvars by
the tracing middleware.
"""

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import EventDict, Processor

from orgpulse import __version__
from orgpulse.config import Settings, get_settings

SERVICE_NAME = "orgpulse"


def add_service_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Tag the event with the emitting service and its version."""
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("version", __version__)
    return event_dict


def add_severity(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add severity level for structured logging."""
    event_dict["severity"] = method_name.upper()
    return event_dict


def build_processors(settings: Settings) -> list[Processor]:
    """
    Processor chain for the given settings.

    Uses JSON rendering in production, console rendering in dev mode.
    """
    # Colors stay off: the CLI logs to stderr next to JSON on stdout
    if settings.log_format == "json" and not settings.dev_mode:
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        add_service_context,
        add_severity,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


def configure_logging(stream: TextIO = sys.stdout) -> None:
    """
    Configure structured logging for the application.

    Args:
        stream: Destination for log lines (the CLI passes stderr)
    """
    settings = get_settings()

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)
