"""
Structured logging with structlog.

``configure_logging()`` is called once from the application lifespan (and
from the CLI).  Every module obtains its logger through ``get_logger`` and
logs snake_case events with key/value context::

    logger = get_logger(__name__)
    logger.info("case_created", case_id=case.id, user_id=user_id)

Request-scoped values (``request_id``, ``user_id``) are bound through
structlog contextvars and merged into every event emitted while the request
is being handled.

Clinical note text, prompts and passwords must never be passed as log
context.

Tags:
    notebridge, core, logging, structlog, contextvars

Doc-Types:
    api-reference
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_SERVICE_NAME = "notebridge"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service", _SERVICE_NAME)
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "notebridge",
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    if json_format is None:
        json_format = not sys.stdout.isatty()

    log_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _add_service_metadata,
    ]

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    render_chain: list[Processor] = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if json_format:
        render_chain += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        render_chain.append(structlog.dev.ConsoleRenderer(colors=True))

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=render_chain,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    # uvicorn / sqlalchemy keep logging through the stdlib and share the renderer
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs of this request/task."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
]
