"""Logging for the expense agent: rich console output and optional daily files.

Records are handed to a queue on the calling thread and written by a
background listener, so slow handlers never stall an agent run.
"""
from __future__ import annotations

import atexit
import logging
import os
from datetime import date, datetime
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from queue import SimpleQueue
from threading import RLock
from typing import NamedTuple, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install as install_rich_traceback

from .context import ContextFilter, log_context
from .timing import timeit

__all__ = ["init_logging", "get_logger", "log_context", "timeit"]

APP_LOGGER = "expense_agent"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(context)s%(message)s"


class _Setup(NamedTuple):
    level: int
    log_dir: Optional[Path]


_lock = RLock()
_active: _Setup | None = None
_listener: QueueListener | None = None
_context_filter = ContextFilter()


def _parse_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


class AgentLogFile(logging.FileHandler):
    """Append to ``agent_YYYY_MM_DD.log``, moving to a new file when the day changes."""

    def __init__(self, directory: Path) -> None:
        directory.mkdir(parents=True, exist_ok=True)
        self.directory = directory
        self.day = date.today()
        super().__init__(self._path(self.day), mode="a", encoding="utf-8")

    def _path(self, day: date) -> Path:
        return self.directory / f"agent_{day:%Y_%m_%d}.log"

    def emit(self, record: logging.LogRecord) -> None:
        day = datetime.fromtimestamp(record.created).date()
        if day != self.day:
            self.day = day
            if self.stream:
                self.stream.close()
            self.baseFilename = os.fspath(self._path(day))
            self.stream = self._open()
        super().emit(record)


def _console_handler(level: int) -> logging.Handler:
    install_rich_traceback(show_locals=False)
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        markup=False,
        log_time_format="%Y-%m-%d %H:%M:%S",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(context)s%(message)s"))
    return handler


def _file_handler(directory: Path, level: int) -> logging.Handler:
    handler = AgentLogFile(directory)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def _stop_listener() -> None:
    global _listener
    if _listener is None:
        return
    _listener.stop()
    for handler in _listener.handlers:
        handler.close()
    _listener = None


def init_logging(level: str | int = "INFO", log_dir: Optional[Path] = None) -> None:
    """Send every record to the rich console, and to daily files under ``log_dir``.

    Repeating a call with the same arguments does nothing; different arguments
    replace the running handlers.
    """

    global _active, _listener
    setup = _Setup(_parse_level(level), Path(log_dir) if log_dir else None)

    with _lock:
        if setup == _active:
            return
        _stop_listener()

        root = logging.getLogger()
        for handler in list(root.handlers):
            root.removeHandler(handler)
        root.setLevel(logging.NOTSET)

        handlers = [_console_handler(setup.level)]
        if setup.log_dir is not None:
            handlers.append(_file_handler(setup.log_dir, setup.level))

        queue_handler = QueueHandler(SimpleQueue())
        queue_handler.setLevel(setup.level)
        # context is resolved on the calling thread, before the record is queued
        queue_handler.addFilter(_context_filter)
        root.addHandler(queue_handler)

        _listener = QueueListener(queue_handler.queue, *handlers, respect_handler_level=True)
        _listener.start()
        _active = setup


def get_logger(name: str | None = None) -> logging.Logger:
    with _lock:
        if _active is None:
            init_logging()
    return logging.getLogger(name or APP_LOGGER)


atexit.register(_stop_listener)
