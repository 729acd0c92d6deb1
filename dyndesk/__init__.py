"""Dyndesk - keeps the virtual desktops of a window manager sized to their use.

A trailing desktop is appended whenever the last one gains a window, and empty
desktops are reclaimed as windows move or the active desktop changes.
The daemon runs as an asyncio service, reading the window manager events and
answering commands on a Unix socket.
"""
