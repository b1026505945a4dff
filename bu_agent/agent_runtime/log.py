"""Logging configuration using loguru.

Every record carries an ``agent`` extra field (the first 16 hex characters of
the agent's public key, or ``-`` before a key exists) so logs from several
agents sharing one terminal or collector can be told apart.

stdlib logging is intercepted so uvicorn, httpx and the modules that use
``logging.getLogger`` end up in the same sink.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

_TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[agent]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

_QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


class _InterceptHandler(logging.Handler):
    """Forward stdlib records to loguru, preserving the original call-site."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO", *, json_logs: bool = False) -> None:
    """Install loguru as the only sink.

    Call once at process startup.  With *json_logs* each record is written as
    one JSON object per line instead of the coloured text format.
    """
    level = level.upper()

    logger.remove()
    logger.configure(extra={"agent": "-"})
    if json_logs:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, level=level, format=_TEXT_FORMAT)

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info("Logging initialised (level={}, json={})", level, json_logs)


def bind_agent(public_key_hex: str) -> None:
    """Tag all subsequent records with this agent's short public key."""
    logger.configure(extra={"agent": public_key_hex[:16]})
