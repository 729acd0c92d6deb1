"""Dyndesk manager - the core daemon class."""

import asyncio
import contextlib
import inspect
import os
import signal
import sys
from collections.abc import Callable
from functools import partial
from typing import Any

from .adapters import BACKENDS
from .adapters.backend import DesktopBackend
from .adapters.proxy import BackendProxy
from .ansi import HandlerStyles, colorize
from .config import Configuration
from .config_loader import ConfigLoader
from .constants import TASK_TIMEOUT
from .desktops import DynamicDesktops
from .logging_setup import LOG_LEVELS, get_logger, set_log_level
from .models import BackendName, DyndeskError, ResponsePrefix
from .process import ManagedProcess
from .schema import DYNDESK_CONFIG_SCHEMA, SECTION
from .subscriptions import WindowSubscriptions
from .validation import ConfigValidator
from .version import VERSION

__all__: list[str] = ["Dyndesk"]


class Dyndesk:  # pylint: disable=too-many-instance-attributes
    """Main app object."""

    server: asyncio.Server
    backend: BackendProxy
    desktops: DynamicDesktops
    subscriptions: WindowSubscriptions
    event_stream: ManagedProcess | None = None
    stopped = False
    log_handler: Callable[[Any, str, tuple], None]

    def __init__(self, config_filename: str = "", backend: DesktopBackend | None = None) -> None:
        """Initialize.

        Args:
            config_filename: Configuration file, defaults to `CONFIG_FILE`
            backend: Backend to use instead of probing the session
        """
        self.log = get_logger()
        self.config_filename = config_filename
        self.config = Configuration({}, logger=self.log, schema=DYNDESK_CONFIG_SCHEMA)
        self.queue: asyncio.Queue[partial | None] = asyncio.Queue()
        self.tasks: list[asyncio.Task] = []
        self.log_handler = self.colored_log_handler
        self._loader = ConfigLoader(self.log)
        self._shared_backend = backend
        signal.signal(signal.SIGTERM, lambda *_: sys.exit(0))

    async def initialize(self) -> None:
        """Load the configuration, select the backend and reach the minimum desktop count."""
        await self.load_config()
        if self._shared_backend is None:
            self._shared_backend = await self._select_backend()
        self.log.info("Using %s backend", self._shared_backend.name)

        self.backend = BackendProxy(self._shared_backend, self.log)
        subscriptions_log = get_logger("subscriptions")
        self.subscriptions = WindowSubscriptions(BackendProxy(self._shared_backend, subscriptions_log), self.queue_event, subscriptions_log)
        desktops_log = get_logger("desktops")
        self.desktops = DynamicDesktops(BackendProxy(self._shared_backend, desktops_log), self.subscriptions, self.config, desktops_log)
        await self.desktops.ensure_minimum()

    async def _select_backend(self) -> DesktopBackend:
        """Return the configured backend, or the first one available in the session."""
        wanted = self.config.get_str("backend")
        candidates = [b for b in BACKENDS if wanted in (BackendName.AUTO, b.name)]
        for backend_class in candidates:
            if await backend_class.is_available():
                return backend_class()
        msg = "No supported window manager detected"
        self.log.critical("%s. Requires KWin, or wmctrl and xprop with an EWMH window manager.", msg)
        raise DyndeskError(msg)

    async def load_config(self) -> None:
        """Load the configuration file and apply it."""
        section = (await self._loader.load(self.config_filename)).get(SECTION, {})
        validator = ConfigValidator(section, SECTION, self.log)
        for error in validator.validate(DYNDESK_CONFIG_SCHEMA):
            self.log.error(error)
        validator.warn_unknown_keys(DYNDESK_CONFIG_SCHEMA)

        self.config.clear()
        self.config.update(section)

        log_level = self.config.get_str("log_level").lower()
        if log_level in LOG_LEVELS:
            set_log_level(log_level)
        colored_logs = self.config.get_bool("colored_handlers_log")
        self.log_handler = self.colored_log_handler if colored_logs else self.plain_log_handler

    def plain_log_handler(self, handler_owner: Any, name: str, params: tuple) -> None:  # noqa: ANN401
        """Log a handler method without color.

        Args:
            handler_owner: The object owning the handler
            name: The handler name
            params: Parameters passed to the handler
        """
        handler_owner.log.debug("%s%s", name, params)

    def colored_log_handler(self, handler_owner: Any, name: str, params: tuple) -> None:  # noqa: ANN401
        """Log a handler method with color.

        Args:
            handler_owner: The object owning the handler
            name: The handler name
            params: Parameters passed to the handler
        """
        style = HandlerStyles.COMMAND if name.startswith("run_") else HandlerStyles.EVENT
        handler_owner.log.debug(colorize(f"{name}{params}", *style))

    async def _run_handler(self, handler_owner: Any, full_name: str, params: tuple) -> tuple[bool, str]:  # noqa: ANN401
        """Run a single handler.

        Returns:
            A tuple of (success, message).
            On success: message contains handler return value (if string) or empty.
            On failure: message contains error description.
        """
        self.log_handler(handler_owner, full_name, params)
        try:
            handler = getattr(handler_owner, full_name)
            if inspect.iscoroutinefunction(handler):
                result = await handler(*params)
            else:
                result = handler(*params)
        except DyndeskError:
            return (False, f"{full_name} failed, check the logs")
        except Exception as e:  # pylint: disable=W0718
            self.log.exception("%s(%s) failed:", full_name, params)
            if os.environ.get("DYNDESK_STRICT_ERRORS"):
                raise
            return (False, f"{full_name}: {e}")

        return (True, result if isinstance(result, str) else "")

    async def _run_handler_with_result(
        self,
        handler_owner: Any,  # noqa: ANN401
        full_name: str,
        params: tuple,
        future: asyncio.Future[tuple[bool, str]],
    ) -> None:
        """Run handler and set result on future for queued commands."""
        try:
            result = await self._run_handler(handler_owner, full_name, params)
            if not future.done():
                future.set_result(result)
        except Exception as e:  # pylint: disable=broad-exception-caught
            if not future.done():
                future.set_result((False, f"{full_name}: {e}"))

    async def _dispatch(self, handler_owner: Any, full_name: str, params: tuple, wait: bool) -> tuple[bool, str]:  # noqa: ANN401
        """Queue a handler call on the desktops runner.

        Args:
            handler_owner: The object owning the handler
            full_name: The full name of the handler
            params: Parameters to pass to the handler
            wait: If True, wait for handler completion
        """
        if wait:
            # Commands: queue and wait for result
            future: asyncio.Future[tuple[bool, str]] = asyncio.get_running_loop().create_future()
            await self.queue.put(partial(self._run_handler_with_result, handler_owner, full_name, params, future))
            try:
                return await asyncio.wait_for(future, timeout=TASK_TIMEOUT)
            except TimeoutError:
                error_msg = f"{full_name}: Command timed out"
                self.log.exception(error_msg)
                return (False, error_msg)
        # Events: queue and continue
        await self.queue.put(partial(self._run_handler, handler_owner, full_name, params))
        return (True, "")

    async def _call_handler(self, full_name: str, *params: Any, wait: bool = False) -> tuple[bool, bool, str]:  # noqa: ANN401
        """Call an event or command handler with params.

        Built-in commands run directly, desktop handlers go through the queue.

        Returns:
            A tuple of (handled, success, message).
        """
        if hasattr(self, full_name):
            success, msg = await self._run_handler(self, full_name, params)
            return (True, success, msg)
        if hasattr(self.desktops, full_name):
            success, msg = await self._dispatch(self.desktops, full_name, params, wait)
            return (True, success, msg)
        return (False, False, "")

    async def queue_event(self, name: str, data: Any) -> None:  # noqa: ANN401
        """Queue the handler of event `name`."""
        handled, _, _ = await self._call_handler(f"event_{name}", data)
        if not handled:
            self.log.debug("No handler for event %s", name)

    # Built-in commands

    async def run_reload(self) -> None:
        """Reload the configuration file."""
        await self.load_config()
        await self.queue.put(partial(self.desktops.ensure_minimum))

    def run_version(self) -> str:
        """Show the version."""
        return f"{VERSION}\n"

    def run_exit(self) -> None:
        """Exit the daemon."""
        self.stopped = True

    # Loops

    async def read_events_loop(self) -> None:
        """Consume the event stream and queue the corresponding handlers."""
        if self.event_stream is None:
            return
        try:
            async for line in self.event_stream.iter_lines():
                for name, data in self.backend.parse_events(line):
                    await self.queue_event(name, data)
        except RuntimeError:
            self.log.exception("Aborting event loop")
            return
        if not self.stopped:
            self.log.critical("Event stream closed")

    async def _execute_queued_task(self, task: partial) -> None:
        """Execute a single queued task with timeout and error handling."""
        try:
            await asyncio.wait_for(task(), timeout=TASK_TIMEOUT)
        except asyncio.CancelledError:
            self.log.warning("Task cancelled: %s", task)
        except TimeoutError:
            self.log.exception("Timeout running %s", task)
        except Exception:  # pylint: disable=W0718
            self.log.exception("Unhandled error running %s", task)
            if os.environ.get("DYNDESK_STRICT_ERRORS"):
                raise

    async def runner_loop(self) -> None:
        """Run the queued handlers one at a time."""
        while not self.stopped:
            task = await self.queue.get()
            if task is None:
                return
            await self._execute_queued_task(task)

    async def _process_command(self, data: str) -> str:
        """Process a control socket command and return the response."""
        args = data.split()
        cmd, params = args[0], args[1:]

        handled, success, msg = await self._call_handler(f"run_{cmd.replace('-', '_')}", *params, wait=True)
        if not handled:
            self.log.warning("No such command: %s", cmd)
            return f'{ResponsePrefix.ERROR}: Unknown command "{cmd}"\n'
        if not success:
            return f"{ResponsePrefix.ERROR}: {msg}\n"
        if msg:
            return f"{ResponsePrefix.OK}\n{msg}"
        return f"{ResponsePrefix.OK}\n"

    async def read_command(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        """Receive a socket command.

        Args:
            reader: The stream reader
            writer: The stream writer
        """
        data = (await reader.readline()).decode().strip()

        if not data:
            self.log.warning("Empty command received")
            writer.write(f"{ResponsePrefix.ERROR}: No command provided\n".encode())
        else:
            writer.write((await self._process_command(data)).encode())

        with contextlib.suppress(BrokenPipeError, ConnectionResetError):
            await writer.drain()
        writer.close()
        if self.stopped:
            asyncio.create_task(self.shutdown())

    async def shutdown(self) -> None:
        """Stop the watchers, the event stream, the runner and the server."""
        self.stopped = True
        await self.subscriptions.clear()
        if self.event_stream:
            await self.event_stream.stop()
        await self.queue.put(None)
        self.server.close()

    async def serve(self) -> None:
        """Run the server."""
        async with self.server:
            await self.server.wait_closed()

    async def run(self) -> None:
        """Run the server, the handlers runner and the event listener."""
        self.event_stream = await self.backend.start_event_stream()
        self.tasks = [
            asyncio.create_task(self.serve()),
            asyncio.create_task(self.runner_loop()),
            asyncio.create_task(self.read_events_loop()),
        ]
        await asyncio.gather(*self.tasks)
