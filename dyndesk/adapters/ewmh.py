"""EWMH (X11) backend using wmctrl and xprop.

Works with any window manager implementing the Extended Window Manager Hints.
Desktops are identified by their number, and a window lives on exactly one
desktop or on all of them.
"""

import asyncio
import os
import re
from logging import Logger

from ..constants import ALL_DESKTOPS
from ..logging_setup import TRACE
from ..models import BackendName, Desktop, Window
from ..process import ManagedProcess, check_command, run_command
from .backend import DesktopBackend, EventData

# "0  * DG: 1920x1080  VP: 0,0  WA: 0,0 1920x1080  Desktop 1"
DESKTOP_RE = re.compile(r"^(\d+)\s+([*-])")
# "0x03a00003  0 hostname Window title"
WINDOW_RE = re.compile(r"^(0x[0-9a-fA-F]+)\s+(-?\d+)\s+(\S+)\s?(.*)$")
CURRENT_DESKTOP_RE = re.compile(r"^_NET_CURRENT_DESKTOP\(CARDINAL\) = (\d+)")
CLIENT_LIST_RE = re.compile(r"^_NET_CLIENT_LIST\(WINDOW\): window id #(.*)$")
WM_DESKTOP_RE = re.compile(r"^_NET_WM_DESKTOP\(CARDINAL\) = (\d+)")

SKIP_PAGER_STATE = "_NET_WM_STATE_SKIP_PAGER"

ROOT_SPY_COMMAND = "xprop -root -spy _NET_CURRENT_DESKTOP _NET_CLIENT_LIST"


def is_x11_session() -> bool:
    """Tell if the windows of the session are X11 windows.

    Under Wayland, wmctrl only sees the XWayland clients.
    """
    return bool(os.environ.get("DISPLAY")) and os.environ.get("XDG_SESSION_TYPE", "x11") == "x11"


def normalize_window_id(window_id: str) -> str:
    """Return the canonical form of a window id (`0x` + 8 hex digits).

    wmctrl zero-pads ids while xprop doesn't.
    """
    return f"0x{int(window_id, 16):08x}"


def parse_desktop_list(output: str) -> tuple[list[tuple[int, str]], int | None]:
    """Parse `wmctrl -d` output.

    Returns:
        The (number, name) pairs sorted by number, and the current desktop number
    """
    desktops: list[tuple[int, str]] = []
    current = None
    for line in output.splitlines():
        match = DESKTOP_RE.match(line.strip())
        if not match:
            continue
        number = int(match.group(1))
        fields = re.split(r"\s{2,}", line.strip())
        name = fields[-1] if len(fields) >= 5 else ""  # noqa: PLR2004
        desktops.append((number, name))
        if match.group(2) == "*":
            current = number
    desktops.sort()
    return desktops, current


def parse_window_list(output: str) -> list[tuple[str, int, str]]:
    """Parse `wmctrl -l` output into (window id, desktop number, title) tuples."""
    windows = []
    for line in output.splitlines():
        match = WINDOW_RE.match(line.strip())
        if match:
            windows.append((normalize_window_id(match.group(1)), int(match.group(2)), match.group(4)))
    return windows


def parse_window_state(output: str) -> set[str]:
    """Parse `xprop -id <win> _NET_WM_STATE` output into the set of state atoms."""
    if "=" not in output:
        return set()
    return {atom.strip() for atom in output.split("=", 1)[1].split(",") if atom.strip()}


class EwmhBackend(DesktopBackend):
    """EWMH backend implementation."""

    name = BackendName.EWMH

    def __init__(self) -> None:
        self._current_desktop: int | None = None
        self._clients: list[str] | None = None
        self._window_desktops: dict[str, int] = {}

    @classmethod
    async def is_available(cls) -> bool:
        """Check if an EWMH window manager is reachable through wmctrl.

        Returns:
            True in an X11 session where `wmctrl -m` works
        """
        return is_x11_session() and await check_command("wmctrl -m")

    # Desktops

    async def _read_desktops(self, log: Logger) -> tuple[list[tuple[int, str]], int | None]:
        output = await run_command("wmctrl -d", log=log)
        if output is None:
            return [], None
        return parse_desktop_list(output)

    async def get_desktops(self, *, log: Logger) -> list[Desktop]:
        """Return the ordered list of desktops.

        Args:
            log: Logger to use for this operation
        """
        desktops, _ = await self._read_desktops(log)
        return [Desktop(index=position, key=number, name=name) for position, (number, name) in enumerate(desktops)]

    async def get_current_desktop(self, *, log: Logger) -> Desktop | None:
        """Return the active desktop.

        Args:
            log: Logger to use for this operation
        """
        desktops, current = await self._read_desktops(log)
        for position, (number, name) in enumerate(desktops):
            if number == current:
                return Desktop(index=position, key=number, name=name)
        return None

    async def _set_desktop_count(self, count: int, log: Logger) -> bool:
        return await run_command(f"wmctrl -n {count}", log=log) is not None

    async def append_desktop(self, label: str, *, log: Logger) -> bool:
        """Create one desktop at the end of the list.

        EWMH has no per-desktop naming request, `label` is only logged.

        Args:
            label: Name of the new desktop
            log: Logger to use for this operation
        """
        desktops = await self.get_desktops(log=log)
        log.debug("Adding desktop #%d (%s)", len(desktops), label)
        return await self._set_desktop_count(len(desktops) + 1, log)

    async def remove_last_desktop(self, *, log: Logger) -> bool:
        """Destroy the last desktop of the list.

        Args:
            log: Logger to use for this operation
        """
        desktops = await self.get_desktops(log=log)
        if not desktops:
            log.warning("No desktop to remove")
            return False
        log.debug("Removing desktop #%d", len(desktops) - 1)
        return await self._set_desktop_count(len(desktops) - 1, log)

    # Windows

    async def _get_window_state(self, window_id: str, log: Logger) -> set[str]:
        output = await run_command(f"xprop -id {window_id} _NET_WM_STATE", log=log, weak=True)
        if output is None:
            return set()
        return parse_window_state(output)

    async def get_windows(self, *, log: Logger) -> list[Window] | None:
        """Return every managed window, None if `wmctrl -l` failed.

        Args:
            log: Logger to use for this operation
        """
        output = await run_command("wmctrl -l", log=log)
        if output is None:
            return None
        entries = parse_window_list(output)
        desktops = await self.get_desktops(log=log)
        states = await asyncio.gather(*(self._get_window_state(window_id, log) for window_id, _, _ in entries))

        windows = []
        for (window_id, number, title), state in zip(entries, states, strict=True):
            on_all = number == ALL_DESKTOPS
            membership = []
            if not on_all:
                desktop = self.desktop_at(desktops, number)
                if desktop is not None:
                    membership.append(desktop)
            windows.append(
                Window(
                    id=window_id,
                    title=title,
                    desktops=membership,
                    skip_pager=SKIP_PAGER_STATE in state,
                    on_all_desktops=on_all,
                )
            )
        return windows

    async def get_window(self, window_id: str, *, log: Logger) -> Window | None:
        """Return the window with id `window_id`, or None if it's gone.

        Args:
            window_id: Window id in any hexadecimal form
            log: Logger to use for this operation
        """
        return await super().get_window(normalize_window_id(window_id), log=log)

    async def set_window_desktops(self, window: Window, desktops: list[Desktop], *, log: Logger) -> bool:
        """Move `window` to the first desktop of `desktops`.

        EWMH windows belong to a single desktop: extra desktops are ignored and
        an empty membership leaves the window untouched.

        Args:
            window: The window to update
            desktops: The complete new membership
            log: Logger to use for this operation
        """
        if not desktops:
            log.debug("Not moving %s: empty desktop list", window.title)
            return False
        if len(desktops) > 1:
            log.debug("%s can only be on one desktop, keeping #%d", window.title, desktops[0].index)
        return await run_command(f"wmctrl -i -r {window.id} -t {desktops[0].index}", log=log, weak=True) is not None

    # Events

    async def start_event_stream(self, *, log: Logger) -> ManagedProcess:
        """Start watching the root window properties.

        Args:
            log: Logger to use for this operation
        """
        self._current_desktop = None
        self._clients = None
        proc = ManagedProcess()
        log.debug("Starting %s", ROOT_SPY_COMMAND)
        await proc.start(ROOT_SPY_COMMAND, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.DEVNULL)
        return proc

    def parse_events(self, raw_data: str, *, log: Logger) -> list[EventData]:
        """Parse a root window property change.

        The first value of each property is the initial state: every window
        already mapped is reported as added, the initial desktop is only recorded.

        Args:
            raw_data: Raw line from `xprop -spy`
            log: Logger to use for this operation
        """
        line = raw_data.strip()
        match = CURRENT_DESKTOP_RE.match(line)
        if match:
            current = int(match.group(1))
            previous, self._current_desktop = self._current_desktop, current
            if previous is None or previous == current:
                return []
            return [("desktopswitch", previous)]

        if line.startswith("_NET_CLIENT_LIST"):
            match = CLIENT_LIST_RE.match(line)
            clients = [normalize_window_id(w) for w in match.group(1).split(",") if w.strip()] if match else []
            known = set(self._clients or [])
            current_set = set(clients)
            self._clients = clients
            events: list[EventData] = [("windowadded", window_id) for window_id in clients if window_id not in known]
            events.extend(("windowremoved", window_id) for window_id in known - current_set)
            return events

        log.log(TRACE, "Ignoring event line: %s", line)
        return []

    async def watch_window(self, window_id: str, *, log: Logger) -> ManagedProcess:
        """Start watching the desktop of a window.

        Args:
            window_id: The window to watch
            log: Logger to use for this operation
        """
        proc = ManagedProcess()
        command = f"xprop -id {normalize_window_id(window_id)} -spy _NET_WM_DESKTOP"
        log.log(TRACE, "Starting %s", command)
        await proc.start(command, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.DEVNULL)
        return proc

    def parse_window_event(self, window_id: str, raw_data: str, *, log: Logger) -> EventData | None:
        """Parse a `_NET_WM_DESKTOP` change of a window.

        The first line is the initial value and produces no event.

        Args:
            window_id: The watched window
            raw_data: Raw line from `xprop -spy`
            log: Logger to use for this operation
        """
        match = WM_DESKTOP_RE.match(raw_data.strip())
        if not match:
            log.log(TRACE, "Ignoring window event line: %s", raw_data.strip())
            return None
        value = int(match.group(1))
        previous = self._window_desktops.get(window_id)
        self._window_desktops[window_id] = value
        if previous is None or previous == value:
            return None
        return ("windowdesktopchanged", window_id)

    def forget_window(self, window_id: str) -> None:
        """Drop the last desktop seen for `window_id`."""
        self._window_desktops.pop(window_id, None)
