"""Structured logging setup built on structlog.

Every module obtains its logger through :func:`get_logger` and logs
event-style messages with key/value context::

    logger = get_logger("engine.scheduler")
    logger.info("wave_start", wave=1, task_ids=["task_1"])
"""

from __future__ import annotations

import logging
import sys

import structlog


def setup_logging(debug: bool = False, json_logs: bool = False, level: str = "") -> None:
    """Configure structlog and the stdlib root logger.

    Parameters
    ----------
    debug:
        Lowers the log level to ``DEBUG`` when *level* is not given.
    json_logs:
        Render one JSON object per line instead of the coloured console
        format.
    level:
        Explicit level name (``"info"``, ``"warning"`` ...).  Overrides
        *debug*.
    """
    if level:
        log_level = logging.getLevelName(level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO
    else:
        log_level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
        force=True,
    )

    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "sayso"):
    """Return a structlog logger bound to *name*."""
    return structlog.get_logger(name)
