"""Driver factory: picks the terminal driver for a mode."""

import logging
from typing import TYPE_CHECKING

from multiai.environment import Environment
from multiai.errors import UnsupportedModeOnPlatform
from multiai.models import TerminalMode
from multiai.timing import SettlePolicy

if TYPE_CHECKING:
    from multiai.adapters.base import TerminalDriver

logger = logging.getLogger(__name__)


def resolve_mode(
    override: TerminalMode | None,
    configured: TerminalMode | None,
    env: Environment,
) -> TerminalMode:
    """Mode priority: CLI override > project config > OS default."""
    if override is not None:
        return override
    if configured is not None:
        return configured
    mode = TerminalMode.system_default(env.os_kind)
    logger.info(f"No mode configured; defaulting to {mode.value} on {env.os_kind}")
    return mode


def create_driver(
    mode: TerminalMode,
    env: Environment,
    settle: SettlePolicy | None = None,
    socket_path: str | None = None,
) -> "TerminalDriver":
    """Create the driver for ``mode``.

    Args:
        mode: Resolved terminal mode
        env: Process environment (OS kind, $TMUX)
        settle: Wait policy before typing into new panes
        socket_path: tmux socket path (tmux modes only)

    Raises:
        UnsupportedModeOnPlatform: iTerm2 requested outside macOS
    """
    if mode == TerminalMode.ITERM2:
        if not env.is_macos:
            raise UnsupportedModeOnPlatform(mode.value, env.os_kind or "this platform")
        from multiai.adapters.iterm2 import ITerm2Driver

        return ITerm2Driver(settle=settle)

    from multiai.adapters.tmux import TmuxDriver

    return TmuxDriver(settle=settle, socket_path=socket_path, attach_with_switch=env.inside_tmux)
