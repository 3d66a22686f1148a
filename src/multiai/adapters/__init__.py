"""Terminal drivers

- TerminalDriver: driver protocol
- BoundPane, RealizedLayout: result of realizing a layout plan
- create_driver, resolve_mode: driver factory
"""

from .base import BoundPane, RealizedLayout, TerminalDriver, command_script
from .factory import create_driver, resolve_mode

__all__ = [
    # Protocol
    "TerminalDriver",
    "BoundPane",
    "RealizedLayout",
    "command_script",
    # Factory
    "create_driver",
    "resolve_mode",
]
