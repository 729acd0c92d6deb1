"""Subprocess helpers for the command line tools driving the window manager.

run_command:
    Runs a one-shot command and returns its output, logging failures.

ManagedProcess:
    Owns a long-running subprocess (SIGTERM -> wait -> SIGKILL on stop) and
    iterates over its output lines.
"""

__all__ = ["ManagedProcess", "check_command", "run_command"]

import asyncio
import contextlib
from collections.abc import AsyncIterator
from logging import Logger
from typing import Any

from .constants import PROCESS_GRACEFUL_TIMEOUT
from .logging_setup import TRACE


async def run_command(command: str, *, log: Logger, weak: bool = False) -> str | None:
    """Run `command` in a shell and return its standard output.

    Args:
        command: Shell command to run
        log: Logger to use for this operation
        weak: Log failures at debug level (for commands racing with the window manager)

    Returns:
        The decoded output, or None if the command failed
    """
    log.log(TRACE, "$ %s", command)
    try:
        proc = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await proc.communicate()
    except OSError as e:
        log.error("Failed to run %s: %s", command, e)
        return None

    if proc.returncode != 0:
        report = log.debug if weak else log.error
        report("%s failed (%s): %s", command, proc.returncode, stderr.decode(errors="replace").strip())
        return None
    return stdout.decode(errors="replace")


async def check_command(command: str) -> bool:
    """Tell if `command` runs successfully, discarding its output."""
    try:
        proc = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        return await proc.wait() == 0
    except OSError:
        return False


class ManagedProcess:
    """A long-running child process, such as an `xprop -spy` watcher.

    `stop()` sends SIGTERM, then SIGKILL if the process is still there after
    `graceful_timeout` seconds.
    """

    def __init__(self, graceful_timeout: float = PROCESS_GRACEFUL_TIMEOUT) -> None:
        self._proc: asyncio.subprocess.Process | None = None
        self._command: str | None = None
        self._graceful_timeout = graceful_timeout

    @property
    def command(self) -> str | None:
        return self._command

    @property
    def pid(self) -> int | None:
        return None if self._proc is None else self._proc.pid

    @property
    def is_alive(self) -> bool:
        return self._proc is not None and self._proc.returncode is None

    @property
    def process(self) -> asyncio.subprocess.Process | None:
        return self._proc

    async def start(self, command: str, **subprocess_kwargs: Any) -> None:  # noqa: ANN401
        """Run `command`, replacing the running process if any.

        `subprocess_kwargs` go to `asyncio.create_subprocess_shell`.
        """
        if self.is_alive:
            await self.stop()
        self._command = command
        self._proc = await asyncio.create_subprocess_shell(command, **subprocess_kwargs)

    async def stop(self) -> int | None:
        """Terminate the process and return its exit code (None if never started)."""
        proc = self._proc
        if proc is None:
            return None
        if proc.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                proc.terminate()
            try:
                await asyncio.wait_for(proc.wait(), timeout=self._graceful_timeout)
            except TimeoutError:
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
                await proc.wait()
        return proc.returncode

    async def iter_lines(self) -> AsyncIterator[str]:
        """Yield the stripped output lines until the process closes its stdout.

        Raises:
            RuntimeError: when the process wasn't started with `stdout=PIPE`
        """
        stdout = self._proc.stdout if self._proc else None
        if stdout is None:
            msg = "No process or stdout not piped"
            raise RuntimeError(msg)
        while True:
            line = await stdout.readline()
            if not line:
                return
            yield line.decode(errors="replace").strip()
