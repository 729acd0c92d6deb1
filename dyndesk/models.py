"""Host entities and shared enums."""

from dataclasses import dataclass, field
from enum import IntEnum, StrEnum

__all__ = [
    "BackendName",
    "Desktop",
    "DyndeskError",
    "ExitCode",
    "ResponsePrefix",
    "Window",
]


@dataclass(frozen=True)
class Desktop:
    """A virtual desktop handle as read from the host.

    `key` is the host identity of the desktop (its number for EWMH window
    managers, an opaque UUID for KWin). Two handles are equal when their keys
    are, whatever the position they were read at.
    """

    index: int = field(compare=False)
    key: int | str
    name: str = field(default="", compare=False)


@dataclass
class Window:
    """Snapshot of a managed window."""

    id: str
    title: str = ""
    desktops: list[Desktop] = field(default_factory=list)
    skip_pager: bool = False
    on_all_desktops: bool = False

    def is_on(self, desktop: Desktop | None) -> bool:
        """Tell if the window is a member of `desktop` (False for unknown desktops)."""
        return desktop is not None and desktop in self.desktops


class BackendName(StrEnum):
    """Supported host variants."""

    AUTO = "auto"
    EWMH = "ewmh"
    KWIN = "kwin"


class DyndeskError(BaseException):
    """Used for errors which already triggered logging."""


class ExitCode(IntEnum):
    """Standard exit codes for the dyndesk client."""

    SUCCESS = 0
    USAGE_ERROR = 1  # No command provided, invalid arguments
    ENV_ERROR = 2  # No supported window manager
    CONNECTION_ERROR = 3  # Cannot connect to daemon
    COMMAND_ERROR = 4  # Command execution failed


class ResponsePrefix(StrEnum):
    """Response prefixes for daemon-client communication."""

    OK = "OK"
    ERROR = "ERROR"
