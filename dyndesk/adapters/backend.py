"""Backend adapter interface."""

from abc import ABC, abstractmethod
from logging import Logger
from typing import Any

from ..models import BackendName, Desktop, Window
from ..process import ManagedProcess

EventData = tuple[str, Any]


class DesktopBackend(ABC):
    """Abstract base class for window manager backends (EWMH, KWin).

    Every read returns a fresh snapshot of the host state: nothing is cached
    between calls, since the window manager mutates desktops and windows out of
    band.

    All methods that perform logging require a `log` parameter to be passed.
    This allows the calling code (via BackendProxy) to inject the appropriate
    logger for traceability.
    """

    name: BackendName

    @classmethod
    @abstractmethod
    async def is_available(cls) -> bool:
        """Tell if the running session provides what this backend needs."""

    # Desktops

    @abstractmethod
    async def get_desktops(self, *, log: Logger) -> list[Desktop]:
        """Return the ordered list of desktops.

        Args:
            log: Logger to use for this operation
        """

    @abstractmethod
    async def get_current_desktop(self, *, log: Logger) -> Desktop | None:
        """Return the active desktop.

        Args:
            log: Logger to use for this operation
        """

    @abstractmethod
    async def append_desktop(self, label: str, *, log: Logger) -> bool:
        """Create one desktop at the end of the list.

        Args:
            label: Name of the new desktop (if the window manager supports names)
            log: Logger to use for this operation

        Returns:
            True if the command succeeded
        """

    @abstractmethod
    async def remove_last_desktop(self, *, log: Logger) -> bool:
        """Destroy the last desktop of the list.

        Args:
            log: Logger to use for this operation

        Returns:
            True if the command succeeded
        """

    # Windows

    @abstractmethod
    async def get_windows(self, *, log: Logger) -> list[Window] | None:
        """Return every managed window.

        Args:
            log: Logger to use for this operation

        Returns:
            The windows, or None if the window manager couldn't be queried
        """

    async def get_window(self, window_id: str, *, log: Logger) -> Window | None:
        """Return the window with id `window_id`, or None if it's gone.

        Args:
            window_id: Window id as given by the events
            log: Logger to use for this operation
        """
        for window in await self.get_windows(log=log) or []:
            if window.id == window_id:
                return window
        return None

    @abstractmethod
    async def set_window_desktops(self, window: Window, desktops: list[Desktop], *, log: Logger) -> bool:
        """Replace the desktop membership of `window`.

        Args:
            window: The window to update
            desktops: The complete new membership
            log: Logger to use for this operation

        Returns:
            True if the command succeeded
        """

    # Events

    @abstractmethod
    async def start_event_stream(self, *, log: Logger) -> ManagedProcess:
        """Start the process reporting window manager events.

        Its output lines are fed to `parse_events`.

        Args:
            log: Logger to use for this operation
        """

    @abstractmethod
    def parse_events(self, raw_data: str, *, log: Logger) -> list[EventData]:
        """Parse one line of the event stream into (event_name, event_data) tuples.

        Args:
            raw_data: Raw line from the event stream
            log: Logger to use for this operation
        """

    @abstractmethod
    async def watch_window(self, window_id: str, *, log: Logger) -> ManagedProcess:
        """Start the process reporting desktop changes of one window.

        Its output lines are fed to `parse_window_event`.

        Args:
            window_id: The window to watch
            log: Logger to use for this operation
        """

    @abstractmethod
    def parse_window_event(self, window_id: str, raw_data: str, *, log: Logger) -> EventData | None:
        """Parse one line of a window watcher output.

        Args:
            window_id: The watched window
            raw_data: Raw line from the watcher
            log: Logger to use for this operation
        """

    def forget_window(self, window_id: str) -> None:  # noqa: B027
        """Drop any parsing state kept for `window_id`."""

    # Helpers

    @staticmethod
    def find_desktop(desktops: list[Desktop], desktop: Desktop | None) -> int:
        """Return the position of `desktop` in `desktops`, -1 if not found."""
        if desktop is None:
            return -1
        try:
            return desktops.index(desktop)
        except ValueError:
            return -1

    @staticmethod
    def desktop_at(desktops: list[Desktop], index: int) -> Desktop | None:
        """Return the desktop at position `index`, None if out of range."""
        if 0 <= index < len(desktops):
            return desktops[index]
        return None
