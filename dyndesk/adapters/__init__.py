"""Backend adapters for window manager abstraction.

This package provides the DesktopBackend abstraction layer that allows
dyndesk to work with EWMH window managers and with KWin, whose desktops are
identified by opaque ids.
"""

from .backend import DesktopBackend
from .ewmh import EwmhBackend
from .kwin import KWinBackend
from .proxy import BackendProxy

__all__ = ["BACKENDS", "BackendProxy", "DesktopBackend", "EwmhBackend", "KWinBackend"]

# Order tried by the "auto" backend setting
BACKENDS: list[type[DesktopBackend]] = [KWinBackend, EwmhBackend]
