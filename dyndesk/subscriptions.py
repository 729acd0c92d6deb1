"""Per-window desktop change watchers."""

import asyncio
from collections.abc import Awaitable, Callable
from logging import Logger
from typing import TYPE_CHECKING, Any

from .logging_setup import TRACE
from .process import ManagedProcess

if TYPE_CHECKING:
    from .adapters.proxy import BackendProxy

__all__ = ["WindowSubscriptions"]

EventCallback = Callable[[str, Any], Awaitable[None]]


class WindowSubscriptions:
    """Keeps one watcher per window and forwards its desktop changes.

    Parsed events are handed to `on_event(name, data)`, which is expected to
    queue them for the main runner.
    """

    def __init__(self, backend: "BackendProxy", on_event: EventCallback, log: Logger) -> None:
        self.backend = backend
        self.on_event = on_event
        self.log = log
        self._watchers: dict[str, tuple[ManagedProcess, asyncio.Task]] = {}

    def __contains__(self, window_id: str) -> bool:
        return window_id in self._watchers

    def __len__(self) -> int:
        return len(self._watchers)

    async def subscribe(self, window_id: str) -> None:
        """Start watching `window_id`, does nothing if it's already watched."""
        if window_id in self._watchers:
            self.log.log(TRACE, "%s is already watched", window_id)
            return
        proc = await self.backend.watch_window(window_id)
        task = asyncio.create_task(self._forward(window_id, proc))
        self._watchers[window_id] = (proc, task)

    async def _forward(self, window_id: str, proc: ManagedProcess) -> None:
        async for line in proc.iter_lines():
            event = self.backend.parse_window_event(window_id, line)
            if event:
                await self.on_event(*event)
        self.log.log(TRACE, "Watcher of %s ended", window_id)

    async def unsubscribe(self, window_id: str) -> bool:
        """Stop watching `window_id`.

        Returns:
            True if the window was watched
        """
        entry = self._watchers.pop(window_id, None)
        if entry is None:
            return False
        proc, task = entry
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception:  # pylint: disable=broad-exception-caught
            self.log.exception("Watcher of %s failed", window_id)
        await proc.stop()
        self.backend.forget_window(window_id)
        return True

    async def clear(self) -> None:
        """Stop every watcher."""
        for window_id in list(self._watchers):
            await self.unsubscribe(window_id)
