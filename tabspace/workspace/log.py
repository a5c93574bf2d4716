"""Logging configuration using loguru.

The workspace modules log straight through loguru.  redis-py and anything
else built on the stdlib ``logging`` module is intercepted so that the CLI
and embedding applications see a single stream with one format.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Chatty below WARNING and never about workspace state.
_QUIET_LOGGERS = ("redis", "redis.connection", "urllib3")


class _InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Custom stdlib levels have no loguru name; fall back to the number
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so the record points at the caller
        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO") -> None:
    """Make loguru the only sink, writing to stderr at ``level``.

    Call once before the workspace is built; the CLI does this on every
    command.  Calling again replaces the previous configuration.
    """
    level = level.upper()

    # Drop loguru's default stderr sink so records are not printed twice
    logger.remove()
    logger.add(sys.stderr, level=level, format=_FORMAT)

    # Route every stdlib logger through loguru
    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logging initialised (level={})", level)
