"""Logging context scoped to a single command invocation."""

import enum
import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

VERBOSE_LOG_LEVEL = 5
LOGGER_NAME = "freee_beancount"


@enum.unique
class LogLevel(enum.Enum):
    VERBOSE = "verbose"
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


LOG_LEVEL_MAP = {
    LogLevel.VERBOSE: VERBOSE_LOG_LEVEL,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.FATAL: logging.FATAL,
}


class LoggingContext:
    """Attaches a RichHandler to the package logger for the lifetime of one run.

    Nothing is configured globally: the handler is removed and the previous
    level restored on ``close``.
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.INFO,
        name: str = LOGGER_NAME,
        console: Optional[Console] = None,
    ):
        self.level = LogLevel(level)
        self.logger = logging.getLogger(name)
        self._handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            markup=False,
        )
        self._handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        self._previous_level = self.logger.level
        self.logger.addHandler(self._handler)
        self.logger.setLevel(LOG_LEVEL_MAP[self.level])
        self._closed = False

    def __enter__(self) -> "LoggingContext":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._closed:
            return
        self.logger.removeHandler(self._handler)
        self.logger.setLevel(self._previous_level)
        self._closed = True

    def debug(self, msg: str, *args) -> None:
        self.logger.debug(msg, *args)

    def info(self, msg: str, *args) -> None:
        self.logger.info(msg, *args)

    def warning(self, msg: str, *args) -> None:
        self.logger.warning(msg, *args)

    def error(self, msg: str, *args) -> None:
        self.logger.error(msg, *args)
