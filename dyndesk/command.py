"""Dyndesk - dynamic virtual desktops (cli client & daemon)."""

import asyncio
import os
import sys

from . import constants as dyndesk_constants
from .client import run_client
from .daemon import run_daemon
from .logging_setup import get_logger, init_logger
from .models import DyndeskError, ExitCode

__all__ = ["main", "use_param"]


def use_param(txt: str) -> str:
    """Check if parameter `txt` is in sys.argv.

    If found, removes it from sys.argv & returns the argument value

    Args:
        txt: Parameter name to look for
    """
    v = ""
    if txt in sys.argv:
        i = sys.argv.index(txt)
        if i + 1 >= len(sys.argv):
            print(f"Missing value for {txt}", file=sys.stderr)
            sys.exit(ExitCode.USAGE_ERROR)
        v = sys.argv[i + 1]
        del sys.argv[i : i + 2]
    return v


def main() -> None:
    """Run the command."""
    debug_flag = use_param("--debug")
    if debug_flag:
        init_logger(filename=debug_flag, force_debug=True)
    else:
        init_logger()
    log = get_logger("startup")

    config_override = use_param("--config")

    if sys.argv[1:2] == ["quickstart"]:
        from .quickstart import main as quickstart_main  # noqa: PLC0415  # pylint: disable=import-outside-toplevel

        quickstart_main(sys.argv[2:])
        return

    invoke_daemon = len(sys.argv) <= 1
    if invoke_daemon and os.path.exists(dyndesk_constants.CONTROL):
        log.critical(
            """%s exists,
is dyndesk already running ?
If that's not the case, delete this file and run again.""",
            dyndesk_constants.CONTROL,
        )
        sys.exit(ExitCode.ENV_ERROR)

    try:
        asyncio.run(run_daemon(config_override) if invoke_daemon else run_client(sys.argv[1:]))
    except KeyboardInterrupt:
        pass
    except DyndeskError:
        log.critical("Command failed.")
        sys.exit(ExitCode.ENV_ERROR)
    except Exception:  # pylint: disable=W0718
        log.critical("Unhandled exception:", exc_info=True)
        sys.exit(ExitCode.COMMAND_ERROR)
    finally:
        if invoke_daemon and os.path.exists(dyndesk_constants.CONTROL):
            os.unlink(dyndesk_constants.CONTROL)


if __name__ == "__main__":
    main()
