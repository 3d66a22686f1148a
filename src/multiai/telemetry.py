"""Telemetry - logging and metrics entry point

One logger factory and one in-memory metrics facade.

Log format: [module] msg
Metrics: mux.commands, mux.failures, worktree.created, worktree.removed
"""

import logging

from . import config

_LOG_FORMAT = "[%(name)s] %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a module logger.

    Args:
        name: Module name (normally ``__name__``)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def setup_logging(level: str | int | None = None) -> None:
    """Configure root logging once for the CLI process.

    Args:
        level: Level name or number. Defaults to ``config.LOG_LEVEL``.
    """
    if level is None:
        level = config.LOG_LEVEL
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(level=level, format=_LOG_FORMAT)


def truncate_command(argv: list[str] | tuple[str, ...]) -> str:
    """Render an argv for logging, truncated to ``config.LOG_MAX_CMD_LEN``."""
    text = " ".join(argv)
    max_len = config.LOG_MAX_CMD_LEN
    if len(text) <= max_len:
        return text
    return text[:max_len] + "..."


class Metrics:
    """Metrics facade

    Simple counters kept in memory; the CLI prints nothing from here, tests
    use it to count external commands.
    """

    def __init__(self):
        self._counters: dict[str, int] = {}

    def inc(self, name: str, labels: dict[str, str] | None = None, value: int = 1) -> None:
        """Increment a counter.

        Args:
            name: Metric name (e.g. "mux.commands")
            labels: Optional labels (e.g. {"backend": "tmux"})
            value: Increment, default 1
        """
        key = self._make_key(name, labels)
        self._counters[key] = self._counters.get(key, 0) + value

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> int:
        """Read a counter (for tests)"""
        key = self._make_key(name, labels)
        return self._counters.get(key, 0)

    def reset(self) -> None:
        """Clear all counters (for tests)"""
        self._counters.clear()

    def _make_key(self, name: str, labels: dict[str, str] | None) -> str:
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"

    def get_all_counters(self) -> dict[str, int]:
        """All counters (for debugging)"""
        return dict(self._counters)


# Global metrics instance
metrics = Metrics()
