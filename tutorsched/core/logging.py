from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_CONFIGURED = False

_QUIET_LOGGERS = ("aiosqlite", "sqlalchemy.engine", "uvicorn.access")


def setup_logging(level: int = logging.INFO, *, json_logs: bool = True) -> None:
    """Configure structlog for the scheduler.

    JSON lines are emitted by default; ``json_logs=False`` switches to the
    console renderer for local runs. Safe to call more than once.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stdout,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
    ]
    if json_logs:
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True
