"""Dynamic desktops: keeps one empty desktop at the end and reclaims the others.

Every decision is taken on a fresh read of the window manager state: desktops
and windows are fetched again for each operation, since removing a desktop
renumbers everything after it.
"""

from logging import Logger
from typing import TYPE_CHECKING

from .config import Configuration
from .constants import DEFAULT_DESKTOP_LABEL, DEFAULT_MIN_DESKTOPS
from .logging_setup import TRACE
from .models import Desktop, DyndeskError, Window

if TYPE_CHECKING:
    from .adapters.proxy import BackendProxy
    from .subscriptions import WindowSubscriptions

__all__ = ["DynamicDesktops"]


class DynamicDesktops:
    """Grows and shrinks the desktop list following the windows."""

    def __init__(
        self,
        backend: "BackendProxy",
        subscriptions: "WindowSubscriptions",
        config: Configuration,
        log: Logger,
    ) -> None:
        self.backend = backend
        self.subscriptions = subscriptions
        self.config = config
        self.log = log

    @property
    def min_desktops(self) -> int:
        """Number of desktops never to go under."""
        return max(1, self.config.get_int("min_desktops", DEFAULT_MIN_DESKTOPS))

    @property
    def desktop_label(self) -> str:
        """Name given to the appended desktops."""
        return self.config.get_str("desktop_label", DEFAULT_DESKTOP_LABEL)

    async def _read_windows(self) -> list[Window]:
        """Return the windows, raise DyndeskError if the window manager can't list them.

        Without the window list every desktop would look empty, so nothing may be removed.
        """
        windows = await self.backend.get_windows()
        if windows is None:
            self.log.error("Can't read the window list, leaving the desktops untouched")
            raise DyndeskError
        return windows

    # Index shifter

    async def shift_window_left_from(self, window: Window, threshold: int) -> None:
        """Move every membership of `window` at or after `threshold` one desktop to the left.

        Memberships before `threshold` are kept as they are. `window.desktops`
        is updated with the written membership.
        """
        self.log.log(TRACE, "shift_window_left_from(%s, %d)", window.title, threshold)
        if threshold == 0:
            return
        desktops = await self.backend.get_desktops()
        if not desktops:
            self.log.error("Can't read the desktop list, not moving %s", window.title)
            raise DyndeskError

        new_desktops: list[Desktop] = [desktop for desktop in desktops[:threshold] if window.is_on(desktop)]
        new_desktops.extend(desktops[i - 1] for i in range(threshold, len(desktops)) if window.is_on(desktops[i]))
        # a window on both threshold-1 and threshold ends up once on threshold-1
        new_desktops = list(dict.fromkeys(new_desktops))

        if new_desktops == window.desktops:
            return
        await self.backend.set_window_desktops(window, new_desktops)
        window.desktops = new_desktops

    # Occupancy analyzer

    async def is_desktop_empty(self, index: int) -> bool:
        """Tell if no regular window is on desktop `index`.

        Windows hidden from the pager and windows shown on all desktops don't count.
        """
        self.log.log(TRACE, "is_desktop_empty(%d)", index)
        desktop = self.backend.desktop_at(await self.backend.get_desktops(), index)
        if desktop is None:
            return True
        for window in await self._read_windows():
            if window.is_on(desktop) and not window.skip_pager and not window.on_all_desktops:
                self.log.debug("Desktop %d not empty because %s is there", index, window.title)
                return False
        return True

    # Count controller

    async def append_desktop(self) -> bool:
        """Add a desktop at the end."""
        self.log.info("Adding a desktop")
        return await self.backend.append_desktop(self.desktop_label)

    async def remove_desktop(self, index: int) -> bool:
        """Delete desktop `index`.

        The last desktop is never removed directly: windows after `index` are
        shifted one desktop to the left, then the last desktop is dropped.

        Returns:
            True if the desktop was deleted, False if it wasn't

        Raises:
            DyndeskError: If the windows can't be read or the last desktop can't be removed
        """
        self.log.log(TRACE, "remove_desktop(%d)", index)
        count = len(await self.backend.get_desktops())
        if count - 1 <= index:
            self.log.debug("Not removing desktop at end")
            return False
        if count <= self.min_desktops:
            self.log.debug("Not removing desktop, too few left")
            return False

        # removing the first desktop is merging the second one into it
        threshold = max(index, 1)
        for window in await self._read_windows():
            await self.shift_window_left_from(window, threshold)
        if not await self.backend.remove_last_desktop():
            # the windows are already shifted, stop before taking any other decision
            self.log.error("Failed to remove the last desktop after shifting the windows, the layout is inconsistent")
            raise DyndeskError

        self.log.info("Desktop %d removed", index)
        return True

    async def is_on_last_desktop(self, window: Window) -> bool:
        """Tell if `window` is on the last desktop."""
        desktops = await self.backend.get_desktops()
        return window.is_on(desktops[-1] if desktops else None)

    async def ensure_minimum(self) -> None:
        """Append desktops until there are at least `min_desktops`."""
        missing = self.min_desktops - len(await self.backend.get_desktops())
        for _ in range(missing):
            if not await self.append_desktop():
                break

    async def compact(self, current_index: int) -> None:
        """Remove the empty desktops around `current_index` and keep the last one empty."""
        removed = False
        for index in range(current_index - 1, -1, -1):
            self.log.debug("Examining desktop %d (left)", index)
            if await self.is_desktop_empty(index):
                removed = await self.remove_desktop(index) or removed

        if removed:
            current_index = await self._current_index()
            if current_index < 0:
                self.log.warning("Can't find the current desktop")
                return

        index = current_index + 1
        while index < len(await self.backend.get_desktops()):
            self.log.debug("Examining desktop %d (right)", index)
            if await self.is_desktop_empty(index) and await self.remove_desktop(index):
                # the next desktop took this index
                continue
            index += 1

        count = len(await self.backend.get_desktops())
        if count and not await self.is_desktop_empty(count - 1):
            await self.append_desktop()

    async def _current_index(self) -> int:
        desktops = await self.backend.get_desktops()
        return self.backend.find_desktop(desktops, await self.backend.get_current_desktop())

    # Event handlers

    async def event_windowadded(self, window_id: str) -> None:
        """A window was mapped (or already existed when the daemon started)."""
        window = await self.backend.get_window(window_id)
        if window is None:
            self.log.info("event_windowadded(%s): window is gone, that may happen rarely", window_id)
            return
        self.log.log(TRACE, "event_windowadded(%s)", window.title)

        if window.skip_pager:
            self.log.debug("Ignoring added hidden window")
            return

        if await self.is_on_last_desktop(window):
            await self.append_desktop()

        await self.subscriptions.subscribe(window.id)

    async def event_windowdesktopchanged(self, window_id: str) -> None:
        """A watched window moved to another desktop."""
        window = await self.backend.get_window(window_id)
        if window is None:
            return
        self.log.log(TRACE, "event_windowdesktopchanged(%s)", window.title)
        if await self.is_on_last_desktop(window):
            await self.append_desktop()

    async def event_windowremoved(self, window_id: str) -> None:
        """A window was destroyed."""
        await self.subscriptions.unsubscribe(window_id)

    async def event_desktopswitch(self, old_desktop: int) -> None:
        """The active desktop changed from desktop number `old_desktop`."""
        self.log.log(TRACE, "event_desktopswitch(%s)", old_desktop)
        desktops = await self.backend.get_desktops()
        old_index = old_desktop if self.backend.desktop_at(desktops, old_desktop) else -1
        current_index = await self._current_index()
        if current_index < 0:
            self.log.warning("Can't find the current desktop")
            return

        if old_index == 0 and current_index != 0 and await self.is_desktop_empty(0):
            self.log.debug("Deleting the first desktop and shifting others left...")
            if await self.remove_desktop(0):
                current_index = await self._current_index()
                if current_index < 0:
                    self.log.warning("Can't find the current desktop")
                    return

        await self.compact(current_index)

    # Commands

    async def run_compact(self) -> None:
        """Remove the empty desktops around the current one."""
        current_index = await self._current_index()
        if current_index < 0:
            self.log.warning("Can't find the current desktop")
            return
        await self.compact(current_index)

    async def run_status(self) -> str:
        """Show the desktops and the windows they hold."""
        desktops = await self.backend.get_desktops()
        current_index = self.backend.find_desktop(desktops, await self.backend.get_current_desktop())
        windows = await self._read_windows()
        lines = [f"backend: {self.backend.name}", f"minimum: {self.min_desktops}"]
        for desktop in desktops:
            titles = [w.title for w in windows if w.is_on(desktop) and not w.skip_pager and not w.on_all_desktops]
            marker = "*" if desktop.index == current_index else " "
            label = desktop.name or str(desktop.key)
            lines.append(f"{marker} {desktop.index}: {label} ({len(titles)} windows) {', '.join(titles)}".rstrip())
        sticky = [w.title for w in windows if w.on_all_desktops]
        if sticky:
            lines.append(f"on all desktops: {', '.join(sticky)}")
        lines.append(f"watched windows: {len(self.subscriptions)}")
        return "\n".join(lines) + "\n"
