"""Client-side functions for dyndesk CLI."""

import asyncio
import sys

from . import constants as dyndesk_constants
from .logging_setup import get_logger
from .models import ExitCode, ResponsePrefix

__all__ = ["run_client"]


async def run_client(args: list[str]) -> None:
    """Send a command to the daemon and print the answer.

    Args:
        args: The command and its arguments
    """
    log = get_logger("client")
    try:
        reader, writer = await asyncio.open_unix_connection(dyndesk_constants.CONTROL)
    except (ConnectionRefusedError, FileNotFoundError):
        log.critical(
            "Cannot connect to dyndesk daemon at %s.\nIs the daemon running? Start it with: dyndesk (no arguments)",
            dyndesk_constants.CONTROL,
        )
        sys.exit(ExitCode.CONNECTION_ERROR)

    writer.write((" ".join(args) + "\n").encode())
    writer.write_eof()
    await writer.drain()
    return_value = (await reader.read()).decode("utf-8")
    writer.close()
    await writer.wait_closed()

    if return_value.startswith(f"{ResponsePrefix.ERROR}:"):
        error_msg = return_value[len(ResponsePrefix.ERROR) + 2 :].strip()
        print(f"Error: {error_msg}", file=sys.stderr)
        sys.exit(ExitCode.COMMAND_ERROR)
    remaining = return_value[len(ResponsePrefix.OK) :].strip() if return_value.startswith(ResponsePrefix.OK) else return_value.strip()
    if remaining:
        print(remaining)
    sys.exit(ExitCode.SUCCESS)
