"""Logging for bgdeploy.

Library code logs through ``get_logger(__name__)``. Commands and the
deployment runner use ``StructuredLogger`` so every line names the app and
foundation it concerns.
"""

import logging
import sys
from enum import Enum
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

PLAIN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class LogLevel(str, Enum):
    """Log level enumeration."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _build_handler(rich_output: bool) -> logging.Handler:
    if rich_output:
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler._bgdeploy = True  # type: ignore[attr-defined]
    return handler


def setup_logging(
    level: LogLevel = LogLevel.INFO,
    rich_output: bool = True,
) -> logging.Logger:
    """Route ``bgdeploy`` loggers to stderr at ``level``.

    Calling it again replaces the handler installed by the previous call and
    leaves handlers added by anything else alone.
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        if getattr(handler, "_bgdeploy", False):
            root_logger.removeHandler(handler)
    root_logger.addHandler(_build_handler(rich_output))

    logger = logging.getLogger("bgdeploy")
    logger.setLevel(getattr(logging, level.value.upper()))
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` under the ``bgdeploy`` namespace."""
    if name == "bgdeploy" or name.startswith("bgdeploy."):
        return logging.getLogger(name)
    return logging.getLogger(f"bgdeploy.{name}")


class StructuredLogger:
    """Logger that appends bound deployment fields to every message.

    Fields such as ``app``, ``foundation`` and ``step`` are rendered after the
    message as ``[app=foo foundation=https://api.example.com step=push]``.
    """

    def __init__(self, name: str, fields: dict[str, Any] | None = None):
        self._logger = get_logger(name)
        self._fields: dict[str, Any] = dict(fields or {})

    def bind(self, **fields: Any) -> "StructuredLogger":
        """Return a logger carrying these fields in addition to the current ones."""
        return StructuredLogger(self._logger.name, {**self._fields, **fields})

    def _log(self, level: int, message: str, fields: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        merged = {**self._fields, **fields}
        if merged:
            message = f"{message} [{' '.join(f'{k}={v}' for k, v in merged.items())}]"
        self._logger.log(level, message)

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(logging.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(logging.WARNING, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._log(logging.ERROR, message, fields)
