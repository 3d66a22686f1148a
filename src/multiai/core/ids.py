"""Terminal-agnostic pane identifiers

A PaneHandle is captured from the command that created the pane and is used
for every later command aimed at it. Positional indices are never stored.

Namespaced string form:
- iterm2:<session_uuid>  - iTerm2 session (pane)
- tmux:%<n>              - tmux pane
"""

import re
from dataclasses import dataclass
from enum import Enum

_TMUX_PANE_ID = re.compile(r"%\d+")


class AdapterType(Enum):
    """Terminal backend type."""

    ITERM2 = "iterm2"
    TMUX = "tmux"


@dataclass(frozen=True)
class PaneHandle:
    """Stable pane identifier.

    Attributes:
        adapter: Backend that owns the pane
        native_id: tmux ``%N`` pane id or iTerm2 session id
        container: tmux session name or iTerm2 tab id the pane lives in
    """

    adapter: AdapterType
    native_id: str
    container: str = ""

    def __str__(self) -> str:
        return make_pane_id(self.adapter, self.native_id)


def make_pane_id(adapter: AdapterType | str, native_id: str) -> str:
    """Create a namespaced pane ID like "iterm2:UUID" or "tmux:%0"."""
    if isinstance(adapter, AdapterType):
        adapter = adapter.value
    return f"{adapter}:{native_id}"


def is_tmux_pane_id(value: str) -> bool:
    """True for tmux pane ids such as "%12"."""
    return bool(_TMUX_PANE_ID.fullmatch(value))
