"""Backend proxy that injects the caller's logger into all calls.

Each component (controller, subscriptions, manager) gets its own BackendProxy
with its own logger, while sharing the underlying backend. This allows backend
operations to be logged under the calling component's logger.
"""

from logging import Logger
from typing import TYPE_CHECKING

from ..models import BackendName, Desktop, Window
from ..process import ManagedProcess

if TYPE_CHECKING:
    from .backend import DesktopBackend, EventData


class BackendProxy:
    """Proxy that injects a logger into all backend calls.

    Attributes:
        log: The logger to use for all backend operations
    """

    def __init__(self, backend: "DesktopBackend", log: Logger) -> None:
        """Initialize the proxy.

        Args:
            backend: The underlying backend to delegate calls to
            log: The logger to inject into all backend calls
        """
        self._backend = backend
        self.log = log

    @property
    def name(self) -> BackendName:
        """Name of the underlying backend."""
        return self._backend.name

    # === Desktops ===

    async def get_desktops(self) -> list[Desktop]:
        """Return the ordered list of desktops."""
        return await self._backend.get_desktops(log=self.log)

    async def get_current_desktop(self) -> Desktop | None:
        """Return the active desktop."""
        return await self._backend.get_current_desktop(log=self.log)

    async def append_desktop(self, label: str) -> bool:
        """Create one desktop at the end of the list."""
        return await self._backend.append_desktop(label, log=self.log)

    async def remove_last_desktop(self) -> bool:
        """Destroy the last desktop of the list."""
        return await self._backend.remove_last_desktop(log=self.log)

    # === Windows ===

    async def get_windows(self) -> list[Window] | None:
        """Return every managed window, None if they can't be read."""
        return await self._backend.get_windows(log=self.log)

    async def get_window(self, window_id: str) -> Window | None:
        """Return the window with id `window_id`, or None."""
        return await self._backend.get_window(window_id, log=self.log)

    async def set_window_desktops(self, window: Window, desktops: list[Desktop]) -> bool:
        """Replace the desktop membership of `window`."""
        return await self._backend.set_window_desktops(window, desktops, log=self.log)

    # === Events ===

    async def start_event_stream(self) -> ManagedProcess:
        """Start the process reporting window manager events."""
        return await self._backend.start_event_stream(log=self.log)

    def parse_events(self, raw_data: str) -> list["EventData"]:
        """Parse one line of the event stream."""
        return self._backend.parse_events(raw_data, log=self.log)

    async def watch_window(self, window_id: str) -> ManagedProcess:
        """Start the process reporting desktop changes of one window."""
        return await self._backend.watch_window(window_id, log=self.log)

    def parse_window_event(self, window_id: str, raw_data: str) -> "EventData | None":
        """Parse one line of a window watcher output."""
        return self._backend.parse_window_event(window_id, raw_data, log=self.log)

    def forget_window(self, window_id: str) -> None:
        """Drop any parsing state kept for `window_id`."""
        self._backend.forget_window(window_id)

    # === Helpers ===

    def find_desktop(self, desktops: list[Desktop], desktop: Desktop | None) -> int:
        """Return the position of `desktop` in `desktops`, -1 if not found."""
        return self._backend.find_desktop(desktops, desktop)

    def desktop_at(self, desktops: list[Desktop], index: int) -> Desktop | None:
        """Return the desktop at position `index`, None if out of range."""
        return self._backend.desktop_at(desktops, index)
