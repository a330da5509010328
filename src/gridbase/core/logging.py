"""Structured logging for GridBase.

Every log line is a structlog event carrying the logger name, level, an ISO
timestamp and a correlation ID. Inside a request the ID comes from the
``X-Correlation-ID`` header (see the request middleware); CLI commands and
background work get a fresh one per event.
"""

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from gridbase.core.config import Settings, get_settings

CORRELATION_ID_PREFIX = "cid_"

# Third-party loggers routed through the same level as the app
THIRD_PARTY_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "aiosqlite")


def new_correlation_id() -> str:
    """Generate a short correlation ID such as ``cid_1a2b3c4d5e6f``."""
    return f"{CORRELATION_ID_PREFIX}{uuid.uuid4().hex[:12]}"


def add_correlation_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Ensure every event has a ``correlation_id``."""
    event_dict.setdefault("correlation_id", new_correlation_id())
    return event_dict


def add_logger_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    # PrintLogger has no ``name``; structlog.stdlib.add_logger_name would fail on it
    event_dict["logger"] = getattr(logger, "name", None) or "gridbase"
    return event_dict


def event_to_message(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Emit the event text under ``message`` for log collectors that expect it."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def _renderers(settings: Settings) -> list[Processor]:
    if settings.is_development or settings.log_format == "console":
        return [
            structlog.dev.ConsoleRenderer(
                colors=sys.stdout.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        ]
    return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the standard library root logger.

    Console rendering is used in development or when ``log_format`` is
    ``console``; JSON otherwise. SQLAlchemy's engine logger follows
    ``db_echo`` so SQL is only printed when asked for.

    Args:
        settings: Settings to read levels and formats from; defaults to the
            cached settings.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_correlation_id,
        event_to_message,
        *_renderers(settings),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=not settings.is_development,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(level)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.db_echo else logging.WARNING
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, named ``gridbase`` unless given a name."""
    return structlog.get_logger(name or "gridbase")


@contextmanager
def log_context(**values: Any) -> Iterator[None]:
    """Bind key/value pairs to every event logged inside the block.

    Example:
        with log_context(schema_id=schema.id):
            logger.info("Rewriting column order")
    """
    with structlog.contextvars.bound_contextvars(**values):
        yield


def bind_correlation_id(correlation_id: str) -> None:
    """Attach ``correlation_id`` to every event logged in the current context."""
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_context() -> None:
    """Drop all bound context; called when a request finishes."""
    structlog.contextvars.clear_contextvars()
