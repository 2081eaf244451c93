"""Levelled console logging with short labels and key/value metadata."""

from __future__ import annotations

import enum
import sys
from datetime import datetime, timezone
from typing import Optional, TextIO


class Level(enum.IntEnum):
    """Log levels; a message is shown when its level is at most the maximum."""

    FATAL = 0
    SILENT = 1
    ERROR = 2
    INFO = 3
    WARNING = 4
    DEBUG = 5
    VERBOSE = 6


_LABELS = {
    Level.FATAL: "FTL",
    Level.ERROR: "ERR",
    Level.INFO: "INF",
    Level.WARNING: "WRN",
    Level.DEBUG: "DBG",
    Level.VERBOSE: "VER",
}


class Logger:
    """Writes labelled messages to a stream, filtered by a maximum level."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        max_level: Level = Level.INFO,
        timestamp: bool = False,
        timestamp_min_level: Level = Level.INFO,
    ) -> None:
        self._stream = stream
        self.max_level = Level(max_level)
        self.timestamp = timestamp
        self.timestamp_min_level = Level(timestamp_min_level)

    def set_max_level(self, level: Level) -> None:
        """Set the most verbose level that is still written."""
        self.max_level = Level(level)

    def enabled(self, level: Level) -> bool:
        """Whether messages of ``level`` are written."""
        return Level(level) <= self.max_level

    def _target(self, level: Level) -> TextIO:
        if self._stream is not None:
            return self._stream
        return sys.stdout if level == Level.SILENT else sys.stderr

    def _emit(self, level: Level, message: str, label: Optional[str], metadata: dict) -> None:
        level = Level(level)
        if not self.enabled(level):
            return
        message = str(message)
        if message.endswith("\n"):
            message = message[:-1]
        parts = []
        if label:
            parts.append(f"[{label}]")
        if self.timestamp and level >= self.timestamp_min_level:
            stamp = datetime.now(timezone.utc).astimezone().isoformat(timespec="seconds")
            parts.append(f"[{stamp}]")
        parts.append(message)
        parts.extend(f"{key}={value}" for key, value in metadata.items())
        stream = self._target(level)
        stream.write(" ".join(parts) + "\n")
        stream.flush()
        if level == Level.FATAL:
            raise SystemExit(1)

    def log(self, level: Level, message: str, **kwargs: object) -> None:
        """Write ``message`` at ``level`` with its default label and metadata."""
        level = Level(level)
        self._emit(level, message, _LABELS.get(level), {k: str(v) for k, v in kwargs.items()})

    def info(self, message: str, **kwargs: object) -> None:
        self.log(Level.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: object) -> None:
        self.log(Level.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: object) -> None:
        self.log(Level.ERROR, message, **kwargs)

    def debug(self, message: str, **kwargs: object) -> None:
        self.log(Level.DEBUG, message, **kwargs)

    def verbose(self, message: str, **kwargs: object) -> None:
        self.log(Level.VERBOSE, message, **kwargs)

    def fatal(self, message: str, **kwargs: object) -> None:
        """Write the message, then exit with status 1."""
        self.log(Level.FATAL, message, **kwargs)

    def print(self, message: str) -> None:
        """Write the message without any label."""
        self._emit(Level.INFO, message, None, {})


DEFAULT_LOGGER = Logger()


def info(message: str, **kwargs: object) -> None:
    DEFAULT_LOGGER.info(message, **kwargs)


def warning(message: str, **kwargs: object) -> None:
    DEFAULT_LOGGER.warning(message, **kwargs)


def error(message: str, **kwargs: object) -> None:
    DEFAULT_LOGGER.error(message, **kwargs)


def debug(message: str, **kwargs: object) -> None:
    DEFAULT_LOGGER.debug(message, **kwargs)


def fatal(message: str, **kwargs: object) -> None:
    DEFAULT_LOGGER.fatal(message, **kwargs)


def echo(message: str) -> None:
    """Write an unlabelled message through the default logger."""
    DEFAULT_LOGGER.print(message)