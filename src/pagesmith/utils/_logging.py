"""Logging utilities for pagesmith.

This module provides standalone structlog logger factories that write
JSON-formatted or text-formatted logs to a file or to stderr. Each logger is
self-contained and does not modify global structlog configuration.
"""

from __future__ import annotations

import logging
import sys
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Literal, cast

import structlog

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from pagesmith.config import LoggingConfig

LogFormatType = Literal["json", "text"]


def _log_level_from_string(level: str, *, respect_env: bool = False) -> int:
    """Convert a log level string to a logging level integer.

    Args:
        level: Log level string (debug, info, warning, error).
        respect_env: If True, PAGESMITH_DEBUG overrides to DEBUG level.

    Returns:
        The logging level as an integer.
    """
    if respect_env and getenv("PAGESMITH_DEBUG", None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(level.upper(), logging.INFO)


def _create_logger(
    log_file_path: str | None,
    *,
    log_level: int = logging.INFO,
    log_format: LogFormatType = "json",
) -> FilteringBoundLogger:
    """Create a standalone structlog logger.

    Args:
        log_file_path: Path to the log file (opened in append mode), or None
            to write to stderr.
        log_level: Minimum level that is emitted.
        log_format: Output format, either "json" or "text".

    Returns:
        A configured FilteringBoundLogger instance.
    """
    if log_file_path:
        log_path = Path(log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        raw_logger = structlog.WriteLogger(file=log_path.open("a", encoding="utf-8"))
    else:
        raw_logger = structlog.PrintLogger(file=sys.stderr)

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Text format: "timestamp [level] event key=value ..."
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            raw_logger,
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
            context_class=dict,
        ),
    )


def create_render_logger(
    config: LoggingConfig | None = None,
    *,
    component: str = "",
) -> FilteringBoundLogger:
    """Create a logger for the rendering subsystem.

    The log level can be overridden by environment variables:
    - PAGESMITH_DEBUG: If set, enables DEBUG level logging regardless of config

    Args:
        config: Logging settings. Defaults to INFO, JSON, stderr.
        component: Optional component name bound to every entry.

    Returns:
        A FilteringBoundLogger instance.
    """
    from pagesmith.config import LoggingConfig  # noqa: PLC0415

    if config is None:
        config = LoggingConfig()

    logger = _create_logger(
        config.file or None,
        log_level=_log_level_from_string(config.level.value, respect_env=True),
        log_format=cast("LogFormatType", config.format.value),
    )

    if component:
        return logger.bind(component=component)
    return logger
