"""
Structured logging for Topic Spine.

Configures structlog once per process and hands out bound loggers.  The
secure facade binds the acting principal with ``LogContext`` so every log
line emitted while serving a call carries ``principal_id`` and ``role``.

Architecture:
    ::

        configure_logging(level="INFO", json_format=None, service="topic-spine")
            │
            ▼
        processor chain:
          1. TimeStamper (iso)
          2. merge_contextvars      ← principal_id / role from LogContext
          3. add_log_level  (logger name is bound by get_logger)
          4. _add_service_metadata
          5. _elasticsearch_compatible   (JSON mode only)
          6. JSONRenderer | ConsoleRenderer

Examples:
    >>> from topic_spine.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> logger = get_logger(__name__)
    >>> logger.info("topic_created", topic_id="01J...", version=1)

    Scoped principal context:

    >>> with LogContext(principal_id="editor-id", role="Editor"):
    ...     logger.info("topic_updated")

Tags:
    logging, structlog, observability, json-logging, topic-spine
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_SERVICE_NAME = "topic-spine"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _elasticsearch_compatible(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Rename timestamp/level to their ECS field names."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")
    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")
    return event_dict


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "topic-spine",
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service
    numeric_level = _resolve_level(level)

    if json_format is None:
        json_format = not sys.stderr.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(_elasticsearch_compatible)
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        # stdout is reserved for CLI output
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structlog bound logger (usually ``get_logger(__name__)``).

    The name is carried as the ``logger`` key; print loggers have no ``name``.
    """
    if name is None:
        return structlog.get_logger()
    # ``logger`` collides with wrap_logger's first parameter, so build the
    # lazy proxy directly to keep the name in the initial context.
    return structlog._config.BoundLoggerLazyProxy(
        None, initial_values={"logger": name}, logger_factory_args=()
    )


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(principal_id="admin-id", role="Admin"):
            logger.info("topic_deleted", topic_id=topic_id)
    """

    def __init__(self, **kwargs: Any):
        self._context = {k: v for k, v in kwargs.items() if v is not None}
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> LogContext:
        self._tokens = structlog.contextvars.bind_contextvars(**self._context)
        return self

    def __exit__(self, *args) -> None:
        # restores values bound by an enclosing LogContext
        structlog.contextvars.reset_contextvars(**self._tokens)


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
