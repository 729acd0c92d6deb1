"""Daemon startup functions for dyndesk."""

import asyncio
from pathlib import Path

from .constants import CONTROL
from .manager import Dyndesk

__all__ = ["run_daemon"]


async def run_daemon(config_filename: str = "") -> None:
    """Run the server / daemon.

    Args:
        config_filename: Configuration file, defaults to `CONFIG_FILE`
    """
    manager = Dyndesk(config_filename)

    control_folder = Path(CONTROL).parent
    try:
        control_folder.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        manager.log.critical("Cannot create control socket folder %s: %s", control_folder, e)
        return

    await manager.initialize()

    # Start server after initialization, commands need the desktops controller
    manager.server = await asyncio.start_unix_server(manager.read_command, CONTROL)

    manager.log.debug("[ initialized ]".center(80, "="))

    try:
        await manager.run()
    except KeyboardInterrupt:
        print("Interrupted")
    except asyncio.CancelledError:
        manager.log.critical("cancelled")
    finally:
        if not manager.stopped:
            await manager.shutdown()
