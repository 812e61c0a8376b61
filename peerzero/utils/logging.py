"""structlog setup for the request path (engine, services, ledger, stores).

Every public engine operation runs inside ``operation_context``, which binds
the operation name and the ids it touches into contextvars. Store and
ledger events emitted while the operation runs carry that context without
each call site passing it along, e.g.::

    {"event": "credibility_applied", "operation": "validate_bounty",
     "target_paper_id": "...", "agent_id": "...", "delta": 3.0, ...}
"""

import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog
from structlog.contextvars import bound_contextvars, merge_contextvars

from peerzero.config.settings import settings


def configure_structured_logging(level: str | None = None, log_format: str | None = None) -> None:
    """
    Configure structlog processors and the renderer.

    Args:
        level: Minimum level; defaults to settings.log_level
        log_format: "console" renders colourised lines on a TTY, anything
            else renders JSON; defaults to settings.log_format
    """
    level = (level or settings.log_level).upper()
    log_format = (log_format or settings.log_format).lower()

    processors = [
        merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]
    if log_format == "console" and sys.stderr.isatty():
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_structured_logger(component: str, **context: Any) -> structlog.BoundLogger:
    """structlog logger bound to ``component`` plus any extra context."""
    return structlog.get_logger().bind(component=component, **context)


@contextmanager
def operation_context(operation: str, **ids: Any) -> Iterator[None]:
    """Bind an engine operation and its ids for every event logged inside.

    None-valued ids are dropped so optional arguments do not clutter events.
    """
    with bound_contextvars(
        operation=operation,
        **{key: value for key, value in ids.items() if value is not None},
    ):
        yield


configure_structured_logging()

__all__ = [
    "configure_structured_logging",
    "get_structured_logger",
    "operation_context",
]
