"""Structured logging setup for the registrar services.

Every module logs through ``structlog.get_logger(__name__)``; this module only
decides how those events are rendered, from ``Settings``:

- ``log_format``: ``json`` (one object per line) or ``text`` (console)
- ``log_level``: minimum level emitted
- ``debug``: adds the calling function and line number to each event

Each event also carries the configured ``service`` name and ``environment``.
"""

import logging
from typing import TYPE_CHECKING

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from registrar.config import Settings


def _service_stamp(service: str, environment: str) -> Processor:
    def stamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service)
        event_dict.setdefault("environment", environment)
        return event_dict

    return stamp


def build_processors(settings: "Settings") -> list[Processor]:
    """Processor chain for the configured format and debug mode."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _service_stamp(settings.service_name, settings.environment),
    ]

    if settings.debug:
        processors.append(structlog.processors.CallsiteParameterAdder(
            {
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            }
        ))

    if settings.log_format == "json":
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    return processors


def setup_logging(settings: "Settings") -> None:
    """
    Configure structlog for the whole process.

    Args:
        settings: Application settings (log_format, log_level, debug, service_name)
    """
    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
