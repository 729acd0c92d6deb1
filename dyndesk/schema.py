"""Schema of the `[dyndesk]` configuration section."""

from .constants import DEFAULT_DESKTOP_LABEL, DEFAULT_MIN_DESKTOPS
from .logging_setup import LOG_LEVELS
from .models import BackendName
from .validation import ConfigField, ConfigItems

__all__ = ["DYNDESK_CONFIG_SCHEMA", "SECTION"]

SECTION = "dyndesk"


def _validate_min_desktops(value: int | str) -> list[str]:
    if int(value) < 1:
        return ["must be at least 1"]
    return []


DYNDESK_CONFIG_SCHEMA = ConfigItems(
    ConfigField(
        "min_desktops",
        int,
        default=DEFAULT_MIN_DESKTOPS,
        description="Minimum number of desktops to keep",
        validator=_validate_min_desktops,
    ),
    ConfigField(
        "desktop_label",
        str,
        default=DEFAULT_DESKTOP_LABEL,
        description="Name given to the desktops created automatically",
    ),
    ConfigField(
        "backend",
        str,
        default=BackendName.AUTO.value,
        description="Window manager interface",
        choices=[b.value for b in BackendName],
    ),
    ConfigField(
        "log_level",
        str,
        default="info",
        description="Verbosity of the daemon logs",
        choices=list(LOG_LEVELS),
    ),
    ConfigField(
        "colored_handlers_log",
        bool,
        default=True,
        description="Colorize the event & command handlers in the logs",
    ),
)
