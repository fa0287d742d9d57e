"""
Logging setup for the media-matrix command line.

Library modules only call logging.getLogger(__name__). The CLI wires up
handlers here: one stderr handler on the root logger (stdout carries command
output such as --json), an optional log file, and an EngineLogger that adds
key=value context to messages and remembers warnings and errors so a run can
end with a summary.
"""

import logging
import sys
import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from media_matrix.config import get_log_dir

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(filename)s:%(lineno)d | %(message)s"


def _level(name: str) -> int:
    return getattr(logging, name.upper())


def with_context(message: str, **context) -> str:
    """Append key=value context: with_context("Scored", total=2.5) -> "Scored [total=2.5]"."""
    if not context:
        return message
    pairs = " ".join(f"{key}={value}" for key, value in context.items())
    return f"{message} [{pairs}]"


@dataclass(frozen=True)
class LogEvent:
    """A warning or error remembered for the end-of-run summary."""

    level: str
    message: str
    data: dict[str, Any] = field(default_factory=dict)
    exception: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


class EngineLogger:
    """
    Thin wrapper over a stdlib logger for CLI runs.

    Args:
        name: Logger name (children of "media_matrix" share its handlers)
        log_level: DEBUG, INFO, WARNING or ERROR
        log_file: File name to also write to, under log_dir
        log_dir: Defaults to MEDIA_MATRIX_LOG_DIR or ./logs
    """

    def __init__(
        self,
        name: str = "media_matrix",
        log_level: str = "INFO",
        log_file: Optional[str] = None,
        log_dir: Optional[Path] = None,
    ):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(_level(log_level))
        self.events: list[LogEvent] = []

        if log_file:
            directory = log_dir or get_log_dir()
            directory.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(directory / log_file, encoding="utf-8")
            handler.setLevel(logging.DEBUG)
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            self.logger.addHandler(handler)
            self.debug("File logging enabled", path=directory / log_file)

    def debug(self, message: str, **context):
        self.logger.debug(with_context(message, **context), stacklevel=2)

    def info(self, message: str, **context):
        self.logger.info(with_context(message, **context), stacklevel=2)

    def warning(self, message: str, **context):
        text = with_context(message, **context)
        self.logger.warning(text, stacklevel=2)
        self.events.append(LogEvent("WARNING", text, dict(context)))

    def error(self, message: str, exception: Optional[BaseException] = None, **context):
        if exception is not None:
            message = f"{message}: {exception}"
        text = with_context(message, **context)
        self.logger.error(text, exc_info=exception, stacklevel=2)
        self.events.append(
            LogEvent("ERROR", text, dict(context), exception=str(exception) if exception is not None else None)
        )

    @property
    def warnings(self) -> list[LogEvent]:
        return [event for event in self.events if event.level == "WARNING"]

    @property
    def errors(self) -> list[LogEvent]:
        return [event for event in self.events if event.level == "ERROR"]

    @contextmanager
    def timed(self, operation: str, **context):
        """Log how long the block took; failures are logged as errors and re-raised."""
        started = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = round(time.perf_counter() - started, 3)
            self.error(f"{operation} failed", exception=e, seconds=elapsed, **context)
            raise
        self.debug(f"{operation} done", seconds=round(time.perf_counter() - started, 3), **context)

    def summary(self) -> dict:
        """Counts plus the remembered events, JSON-serializable."""
        return {
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "events": [asdict(event) for event in self.events],
        }

    def reset(self):
        self.events = []


def configure_logging(log_level: str = "INFO") -> logging.Handler:
    """Route all log records at or above log_level to stderr; returns the handler."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_level(log_level))
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(_level(log_level))
    root.handlers.clear()
    root.addHandler(handler)
    return handler
