"""Logging configuration using structlog.

Every event carries ``app`` and ``environment``. Events emitted while an API
request is being handled also carry its ``request_id``, bound through
structlog's context variables by :func:`request_context`.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog

from vulcan.config import get_settings

APP_NAME = "vulcan"


def app_context_processor(environment: str) -> structlog.types.Processor:
    """Processor stamping the application name and deployment environment."""

    def add_app_context(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("app", APP_NAME)
        event_dict.setdefault("environment", environment)
        return event_dict

    return add_app_context


@contextmanager
def request_context(request_id: str, **values: Any) -> Iterator[None]:
    """Bind ``request_id`` (and any extra values) to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(request_id=request_id, **values):
        yield


def configure_logging() -> None:
    """Configure structured logging for the application."""
    settings = get_settings()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        app_context_processor(settings.environment),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.is_production:
        shared_processors.append(structlog.processors.format_exc_info)
        shared_processors.append(structlog.processors.JSONRenderer())
    else:
        shared_processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.database_echo else logging.WARNING
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger(name)
