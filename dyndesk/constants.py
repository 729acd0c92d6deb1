"""Shared constants for dyndesk."""

import os
from pathlib import Path

__all__ = [
    "ALL_DESKTOPS",
    "CONFIG_FILE",
    "CONTROL",
    "DEFAULT_DESKTOP_LABEL",
    "DEFAULT_MIN_DESKTOPS",
    "KWIN_DESKTOP_INTERFACE",
    "KWIN_DESKTOP_PATH",
    "KWIN_SERVICE",
    "PROCESS_GRACEFUL_TIMEOUT",
    "TASK_TIMEOUT",
]

_runtime_dir = os.environ.get("XDG_RUNTIME_DIR")
CONTROL = f"{_runtime_dir}/dyndesk.sock" if _runtime_dir else f"/tmp/dyndesk-{os.getuid()}.sock"  # noqa: S108

_xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
CONFIG_FILE = _xdg_config_home / "dyndesk" / "config.toml"

TASK_TIMEOUT = 35.0

# Seconds between SIGTERM and SIGKILL for watcher processes
PROCESS_GRACEFUL_TIMEOUT = 1.0

DEFAULT_MIN_DESKTOPS = 2
DEFAULT_DESKTOP_LABEL = "Dynamic"

# Desktop number reported by `wmctrl -l` for sticky windows
ALL_DESKTOPS = -1

KWIN_SERVICE = "org.kde.KWin"
KWIN_DESKTOP_PATH = "/VirtualDesktopManager"
KWIN_DESKTOP_INTERFACE = "org.kde.KWin.VirtualDesktopManager"
