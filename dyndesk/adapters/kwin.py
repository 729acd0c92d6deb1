"""KWin backend.

Desktops are managed through KWin's VirtualDesktopManager D-Bus interface,
where they are identified by opaque ids. Windows and events still go through
EWMH, KWin maps X11 desktop numbers to desktop positions.
"""

import json
import shlex
from logging import Logger
from typing import Any

from ..constants import KWIN_DESKTOP_INTERFACE, KWIN_DESKTOP_PATH, KWIN_SERVICE
from ..logging_setup import get_logger
from ..models import BackendName, Desktop
from ..process import check_command, run_command
from .ewmh import EwmhBackend, is_x11_session

BUSCTL = f"busctl --user --json=short {{verb}} {KWIN_SERVICE} {KWIN_DESKTOP_PATH} {KWIN_DESKTOP_INTERFACE}"


def parse_kwin_desktops(payload: dict[str, Any]) -> list[Desktop]:
    """Convert the `desktops` property (signature `a(uss)`) to a sorted Desktop list.

    Example payload:
        {"type": "a(uss)", "data": [[0, "8f3e...", "Desktop 1"], [1, "c71a...", "Desktop 2"]]}
    """
    entries = sorted(payload.get("data", []), key=lambda entry: entry[0])
    return [Desktop(index=position, key=str(desktop_id), name=str(name)) for position, (_, desktop_id, name) in enumerate(entries)]


class KWinBackend(EwmhBackend):
    """KWin backend implementation."""

    name = BackendName.KWIN

    @classmethod
    async def is_available(cls) -> bool:
        """Check if KWin's desktop manager answers and its windows can be listed.

        Windows are read through X11: native Wayland windows are invisible to
        wmctrl, their desktops would look empty.

        Returns:
            True if the D-Bus interface can be introspected and `wmctrl -l` works in an X11 session
        """
        if not await check_command(f"busctl --user introspect {KWIN_SERVICE} {KWIN_DESKTOP_PATH} {KWIN_DESKTOP_INTERFACE}"):
            return False
        if is_x11_session() and await check_command("wmctrl -l"):
            return True
        get_logger("kwin").critical("KWin found, but dyndesk only sees X11 windows: run Plasma in an X11 session with wmctrl installed")
        return False

    async def _busctl(self, verb: str, arguments: str, log: Logger) -> Any:  # noqa: ANN401
        output = await run_command(f"{BUSCTL.format(verb=verb)} {arguments}", log=log)
        if output is None:
            return None
        if not output.strip():
            return {}
        try:
            return json.loads(output)
        except json.JSONDecodeError:
            log.exception("Invalid busctl output: %s", output)
            return None

    async def get_desktops(self, *, log: Logger) -> list[Desktop]:
        """Return the ordered list of desktops.

        Args:
            log: Logger to use for this operation
        """
        payload = await self._busctl("get-property", "desktops", log)
        if not payload:
            return []
        return parse_kwin_desktops(payload)

    async def get_current_desktop(self, *, log: Logger) -> Desktop | None:
        """Return the active desktop.

        Args:
            log: Logger to use for this operation
        """
        payload = await self._busctl("get-property", "current", log)
        if not payload:
            return None
        desktops = await self.get_desktops(log=log)
        current = Desktop(index=-1, key=str(payload.get("data", "")))
        return self.desktop_at(desktops, self.find_desktop(desktops, current))

    async def append_desktop(self, label: str, *, log: Logger) -> bool:
        """Create one desktop at the end of the list.

        Args:
            label: Name of the new desktop
            log: Logger to use for this operation
        """
        desktops = await self.get_desktops(log=log)
        log.debug("Adding desktop #%d (%s)", len(desktops), label)
        return await self._busctl("call", f"createDesktop us {len(desktops)} {shlex.quote(label)}", log) is not None

    async def remove_last_desktop(self, *, log: Logger) -> bool:
        """Destroy the last desktop of the list.

        Args:
            log: Logger to use for this operation
        """
        desktops = await self.get_desktops(log=log)
        if not desktops:
            log.warning("No desktop to remove")
            return False
        last = desktops[-1]
        log.debug("Removing desktop #%d (%s)", last.index, last.key)
        return await self._busctl("call", f"removeDesktop s {shlex.quote(str(last.key))}", log) is not None
