"""Loguru setup for the pure engine components.

Scoring, reconciliation and tier components log through loguru with a
bound ``component``. Output goes to stderr (console on a TTY with
PEERZERO_LOG_FORMAT=console, JSON lines otherwise). When a persistence
directory is configured, a rotating JSON log is written next to the
store files so credibility decisions can be traced after the fact.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from peerzero.config.settings import settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <7}</level> | "
    "<cyan>{extra[component]: <22}</cyan> | <level>{message}</level>"
)


def configure_logging(
    level: Optional[str] = None,
    log_format: Optional[str] = None,
    persistence_dir: Optional[str] = None,
) -> None:
    """
    (Re)configure loguru sinks.

    Args:
        level: Minimum level; defaults to settings.log_level
        log_format: "console" or "json"; defaults to settings.log_format
        persistence_dir: Adds a rotating file sink under <dir>/logs when set;
            defaults to settings.persistence_dir
    """
    level = (level or settings.log_level).upper()
    log_format = (log_format or settings.log_format).lower()
    persistence_dir = persistence_dir or settings.persistence_dir

    logger.remove()
    logger.configure(extra={"component": "peerzero"})

    if log_format == "console" and sys.stderr.isatty():
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)
    else:
        logger.add(sys.stderr, format="{message}", level=level, serialize=True, diagnose=False)

    if persistence_dir:
        logger.add(
            Path(persistence_dir) / "logs" / "engine.jsonl",
            level=level,
            serialize=True,
            rotation="10 MB",
            retention=5,
            enqueue=True,
            diagnose=False,
        )


def get_logger(component: str):
    """Loguru logger bound to a component name, e.g. ``get_logger("cli")``."""
    return logger.bind(component=component)


configure_logging()

__all__ = ["logger", "get_logger", "configure_logging"]
