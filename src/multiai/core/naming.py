"""Deterministic names for sessions, tabs and worktree branches."""

from pathlib import Path

# tmux rewrites these in session names ("a.b" becomes "a_b")
_TMUX_RENAMED_CHARS = str.maketrans({".": "_", ":": "_"})


def session_name(project: str, branch_prefix: str) -> str:
    """tmux session / iTerm2 tab name: ``<project>-<branch_prefix>``.

    ``.`` and ``:`` become ``_``, the same substitution tmux applies when
    it creates a session, so the name can be used as a target afterwards.
    """
    return f"{project}-{branch_prefix}".translate(_TMUX_RENAMED_CHARS)


def worktree_branch_name(branch_prefix: str, app_name: str) -> str:
    """Worktree directory and branch name: ``<branch_prefix>-<app_name>``."""
    return f"{branch_prefix}-{app_name}"


def project_name(project_path: Path) -> str:
    """Project name is the last component of the project path."""
    return project_path.name


def app_from_branch(branch_prefix: str, branch_name: str) -> str:
    """Inverse of :func:`worktree_branch_name` ("feat-claude" -> "claude")."""
    prefix = f"{branch_prefix}-"
    if branch_name.startswith(prefix):
        return branch_name[len(prefix):]
    return branch_name
