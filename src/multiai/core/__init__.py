"""Core module - terminal-agnostic identifiers and naming"""

from .ids import AdapterType, PaneHandle, is_tmux_pane_id
from .naming import project_name, session_name, worktree_branch_name

__all__ = [
    "AdapterType",
    "PaneHandle",
    "is_tmux_pane_id",
    "project_name",
    "session_name",
    "worktree_branch_name",
]
