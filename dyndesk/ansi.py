"""Terminal colors for the logs.

Colors are disabled by NO_COLOR, forced by FORCE_COLOR, and otherwise only
used when the stream is a terminal.
"""

import os
import sys
from enum import StrEnum
from typing import TextIO

__all__ = ["RESET", "Code", "HandlerStyles", "LogStyles", "colorize", "make_style", "should_colorize"]

_CSI = "\x1b["
RESET = f"{_CSI}0m"


class Code(StrEnum):
    """SGR parameters used by dyndesk."""

    BOLD = "1"
    DIM = "2"
    BLACK = "30"
    RED = "31"
    YELLOW = "33"
    CYAN = "36"


def should_colorize(stream: TextIO | None = None) -> bool:
    """Tell if `stream` (stderr by default) should receive escape sequences."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    target = sys.stderr if stream is None else stream
    isatty = getattr(target, "isatty", None)
    return bool(isatty and isatty())


def _sequence(codes: tuple[str, ...]) -> str:
    return f"{_CSI}{';'.join(codes)}m"


def make_style(*codes: str) -> tuple[str, str]:
    """Return the (prefix, suffix) strings surrounding a styled log format."""
    return (_sequence(codes) if codes else "", RESET)


def colorize(text: str, *codes: str) -> str:
    """Return `text` wrapped in the escape sequences of `codes`."""
    if not codes:
        return text
    prefix, suffix = make_style(*codes)
    return prefix + text + suffix


class LogStyles:
    """Styles of the log levels."""

    WARNING = (Code.YELLOW, Code.DIM)
    ERROR = (Code.RED, Code.DIM)
    CRITICAL = (Code.RED, Code.BOLD)


class HandlerStyles:
    """Styles of the handler traces."""

    COMMAND = (Code.YELLOW, Code.BOLD)
    EVENT = (Code.CYAN, Code.BOLD)
