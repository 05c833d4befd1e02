"""Logging setup shared by the CLI, watcher and service."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

ROOT_LOGGER = "projectinfo"

_CONSOLE_FORMAT = "[projectinfo] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(component: str | None = None) -> logging.Logger:
    """Return ``projectinfo.<component>``, or the package logger itself."""
    if not component:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{component}")


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send projectinfo records to stderr and, when given, append them to ``log_file``.

    Stdout stays reserved for command output such as the detection JSON.
    Calling this again replaces the previous handlers.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False
    _drop_handlers(logger)

    logger.addHandler(_handler(logging.StreamHandler(sys.stderr), level, _CONSOLE_FORMAT))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        logger.addHandler(_handler(sink, level, _FILE_FORMAT))
    return logger


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _drop_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        # Closes any file sink left by an earlier call.
        handler.close()


__all__ = ["configure_logging", "get_logger"]
