"""Append-only event log file.

Every record from the ``nextblock`` logger hierarchy is appended to the
configured log file as ``YYYY-MM-DD HH:MM:SS - message``. The target file
follows the ``log_file`` setting and may change between poll ticks.
"""

import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


class SingleLineFormatter(logging.Formatter):
    """Formats each record as exactly one line.

    Embedded newlines (multi-line messages, tracebacks) are escaped so every
    line in the file starts with a timestamp.
    """

    def format(self, record: logging.LogRecord) -> str:
        return super().format(record).replace("\r", "\\r").replace("\n", "\\n")


class EventLog:
    """Owns the file handler attached to the package logger."""

    def __init__(self, logger_name: str = "nextblock", level: int = logging.INFO) -> None:
        self._logger = logging.getLogger(logger_name)
        self._level = level
        self._handler: Optional[logging.FileHandler] = None
        self.path: Optional[Path] = None

    def attach(self, path: Path) -> bool:
        """Point the log at ``path``, replacing any previous file.

        Returns:
            True if the file is now the active log target. On failure the
            previous handler (if any) stays in place.
        """
        if self._handler is not None and path == self.path:
            return True

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # FileHandler writes each formatted record with a single write()
            # and flush() under its lock; lines are never interleaved.
            handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        except OSError as e:
            logger.warning(f"Cannot open log file {path}: {e}")
            return False

        handler.setFormatter(SingleLineFormatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
        handler.setLevel(self._level)

        if self._logger.getEffectiveLevel() > self._level:
            self._logger.setLevel(self._level)

        previous = self._handler
        self._logger.addHandler(handler)
        self._handler = handler
        self.path = path
        if previous is not None:
            self._logger.removeHandler(previous)
            previous.close()
            logger.info(f"Log file changed to {path}")
        return True

    def close(self) -> None:
        if self._handler is not None:
            self._logger.removeHandler(self._handler)
            self._handler.close()
            self._handler = None
            self.path = None
