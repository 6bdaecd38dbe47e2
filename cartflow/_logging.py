"""
Logging setup.

Modules log through `structlog.get_logger(__name__)`; this wires structlog
onto the standard library handlers once, at startup.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Libraries that log every statement at INFO
_NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite")


def configure_logging(level: str = "INFO", json: bool = False) -> None:
    """
    Configure structlog and the root logger.

    Example:
        configure_logging(settings.log_level, json=settings.log_json)
    """
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level.upper(), force=True)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if json:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


__all__ = ("configure_logging",)
