"""Loggers of the daemon and the client.

`init_logger()` builds the shared handlers once, `get_logger(name)` hands out
named loggers using them. The level follows the debug mode, or the
`log_level` option once the configuration is loaded.
"""

import logging
import os

from .ansi import LogStyles, make_style, should_colorize

__all__ = ["LOG_LEVELS", "TRACE", "LogObjects", "get_logger", "init_logger", "is_debug", "set_debug", "set_log_level"]

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LOG_LEVELS = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
}

FILE_FORMAT = r"%(asctime)s [%(levelname)s] %(name)s :: %(message)s :: %(filename)s:%(lineno)d"


class LogObjects:
    """Shared logging state."""

    handlers: list[logging.Handler] = []
    loggers: dict[str, logging.Logger] = {}
    level: int | None = None
    # `--debug` on the command line, or DYNDESK_DEBUG in the environment
    debug = bool(os.environ.get("DYNDESK_DEBUG"))


def is_debug() -> bool:
    return LogObjects.debug


def set_debug(value: bool) -> None:
    LogObjects.debug = value


class ScreenFormatter(logging.Formatter):
    """Terminal formatter, warnings and errors are colored when possible."""

    def __init__(self) -> None:
        super().__init__()
        fmt = r"%(name)20s - %(message)s // %(filename)s:%(lineno)d" if is_debug() else r"[%(name)s] %(message)s"
        colored = should_colorize()
        self._plain = logging.Formatter(fmt)
        self._by_level: dict[int, logging.Formatter] = {}
        for level, style in (
            (logging.WARNING, LogStyles.WARNING),
            (logging.ERROR, LogStyles.ERROR),
            (logging.CRITICAL, LogStyles.CRITICAL),
        ):
            prefix, suffix = make_style(*style) if colored else ("", "")
            self._by_level[level] = logging.Formatter(prefix + fmt + suffix)

    def format(self, record: logging.LogRecord) -> str:
        return self._by_level.get(record.levelno, self._plain).format(record)


def init_logger(filename: str | None = None, force_debug: bool = False) -> None:
    """Create the handlers used by every logger.

    Args:
        filename: Also write the logs to this file
        force_debug: Enable the debug mode
    """
    if force_debug:
        set_debug(True)

    LogObjects.handlers.clear()
    if filename:
        file_handler = logging.FileHandler(filename)
        file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT))
        LogObjects.handlers.append(file_handler)
    screen_handler = logging.StreamHandler()
    screen_handler.setFormatter(ScreenFormatter())
    LogObjects.handlers.append(screen_handler)


def _default_level() -> int:
    if is_debug():
        return logging.DEBUG
    return logging.INFO if LogObjects.level is None else LogObjects.level


def get_logger(name: str = "dyndesk", level: int | None = None) -> logging.Logger:
    """Return the logger called `name`, plugged to the shared handlers.

    Args:
        name: The logger name
        level: Its level, follows the global setting if not set
    """
    logger = logging.getLogger(name)
    logger.setLevel(_default_level() if level is None else level)
    logger.propagate = False
    for handler in LogObjects.handlers:
        if handler not in logger.handlers:
            logger.addHandler(handler)
    LogObjects.loggers[name] = logger
    logger.debug('Logger "%s" initialized', name)
    return logger


def set_log_level(level_name: str) -> None:
    """Apply a named level ("trace", "debug", "info", "warning") to every logger.

    Debug mode (`--debug` or `DYNDESK_DEBUG` env) keeps at least the DEBUG level.
    """
    level = LOG_LEVELS[level_name.lower()]
    if is_debug():
        level = min(level, logging.DEBUG)
    LogObjects.level = level
    for logger in LogObjects.loggers.values():
        logger.setLevel(level)
