"""iTerm2 driver for multiai."""

from multiai.adapters.iterm2.client import ITerm2Client
from multiai.adapters.iterm2.driver import ITerm2Driver
from multiai.adapters.iterm2.naming import get_tab_name, set_session_name, set_tab_name

__all__ = [
    "ITerm2Client",
    "ITerm2Driver",
    "get_tab_name",
    "set_session_name",
    "set_tab_name",
]
