"""Logging setup and a contextual logger for cascade diagnostics.

Relay callbacks arrive on platform watcher threads, so the format carries
the thread name next to the logger name.
"""

from __future__ import annotations

import logging as _logging
import os
from logging.handlers import RotatingFileHandler
from typing import Any

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s (%(threadName)s): %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are chatty at INFO.
_NOISY_LOGGERS = ("uvicorn.access", "watchfiles", "nicegui")


def setup_logging(
    log_level: str = "INFO",
    log_dir: str = "logs",
    max_bytes: int = 2 * 1024 * 1024,  # 2 MB
    backup_count: int = 3,
) -> None:
    """Configure the root logger with console + rotating-file handlers.

    Safe to call more than once; existing root handlers are replaced.

    Args:
        log_level: One of DEBUG / INFO / WARNING / ERROR / CRITICAL.
        log_dir: Directory for ``tvhome.log`` (created if absent).
        max_bytes: Max size per log file before rotation.
        backup_count: Number of rotated files to keep.
    """
    level = getattr(_logging, log_level.upper(), _logging.INFO)

    root = _logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    formatter = _logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT)

    console = _logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)

    os.makedirs(log_dir, exist_ok=True)
    file_handler = RotatingFileHandler(
        os.path.join(log_dir, "tvhome.log"),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    if level > _logging.DEBUG:
        for name in _NOISY_LOGGERS:
            _logging.getLogger(name).setLevel(_logging.WARNING)


class ContextualLogger:
    """Prepends ``[key=value]`` context to every message.

    Usage::

        log = ContextualLogger(logging.getLogger(__name__), cascade="power-off")
        log.warning("attempt %s failed", name)
        # => "[cascade=power-off] attempt vendor-low-level failed"
    """

    def __init__(self, logger: _logging.Logger, **context: Any) -> None:
        self._logger = logger
        self._context = dict(context)
        self._prefix = " ".join(f"[{k}={v}]" for k, v in context.items())

    def bind(self, **extra: Any) -> ContextualLogger:
        """Return a new logger carrying this context plus *extra*."""
        return ContextualLogger(self._logger, **{**self._context, **extra})

    def _fmt(self, msg: str) -> str:
        return f"{self._prefix} {msg}" if self._prefix else msg

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(self._fmt(msg), *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(self._fmt(msg), *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(self._fmt(msg), *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.error(self._fmt(msg), *args, **kwargs)

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.exception(self._fmt(msg), *args, **kwargs)
