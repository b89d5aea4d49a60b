# src/fedshake/core/logging.py
"""Structured logging for fedshake.

structlog and stdlib logging share one handler and one ProcessorFormatter,
so records from backend plugins (logging.getLogger(__name__)) render the
same way as engine events (get_logger()).

Logs go to stderr unless another stream is passed: stdout is where the
CLI prints the shaken supergraph config.

GraphQL errors are common event values here (composition and validation
failures). They are rendered as their messages so JSON output stays
serialisable and console output stays one line per event.
"""

import logging
import sys
from collections.abc import Iterable
from typing import Any, TextIO

import structlog
from graphql import GraphQLError
from structlog.stdlib import ProcessorFormatter

# Plugin machinery loggers that are noise even in DEBUG mode
_NOISY_LOGGERS: tuple[str, ...] = (
    "pluggy",
    "dynaconf",
)


def _render_graphql_errors(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Replace GraphQLError values (alone or in a list/tuple) by their messages."""
    for key, value in event_dict.items():
        if isinstance(value, GraphQLError):
            event_dict[key] = value.message
        elif isinstance(value, list | tuple) and any(isinstance(item, GraphQLError) for item in value):
            event_dict[key] = [item.message if isinstance(item, GraphQLError) else item for item in value]
    return event_dict


def _shared_processors() -> list[Any]:
    """Processors applied to structlog events and foreign stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        _render_graphql_errors,
    ]


def _render_processors(json_output: bool) -> Iterable[Any]:
    yield ProcessorFormatter.remove_processors_meta
    if json_output:
        yield structlog.processors.format_exc_info
        yield structlog.processors.JSONRenderer()
    else:
        yield structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
    stream: TextIO | None = None,
) -> None:
    """Configure structlog and stdlib logging for fedshake.

    Args:
        json_output: One JSON object per line instead of console rendering
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        stream: Destination, sys.stderr (looked up at call time) if None
    """
    log_level = getattr(logging, level.upper())
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Caching off so tests can reconfigure logging
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(ProcessorFormatter(processors=list(_render_processors(json_output)), foreign_pre_chain=shared))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    # Never make noisy loggers less restrictive than the root level
    noisy_level = max(log_level, logging.WARNING)
    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(noisy_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Bound logger for a module (pass __name__)."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
