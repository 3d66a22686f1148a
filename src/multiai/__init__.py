"""multiai - parallel AI coding sessions in git worktrees."""

__version__ = "0.3.0"
