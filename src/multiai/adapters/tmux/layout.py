"""Tmux session layout builder.

Turns ``TmuxClient.list_panes()`` output back into app/role assignments so
text can be sent to launcher or shell panes of a running session.

Mapping:
- "apps" window (single-window mode): panes grouped into columns by their
  left edge; the top pane of each column is the launcher, the app comes
  from the worktree directory name
- any other window (multi-window mode): the window name is the app; the
  left-most top pane is the launcher
"""

from dataclasses import dataclass
from pathlib import PurePath

from multiai import config
from multiai.layout.planner import PaneRole


@dataclass(frozen=True)
class SessionPane:
    """A pane of a running session."""

    pane_id: str
    window: str
    app_name: str | None
    role: PaneRole
    current_command: str
    path: str


def app_for_path(path: str, app_names: list[str]) -> str | None:
    """Match a worktree path ("…/feat-claude") to a configured app name.

    Longest name wins, so "gemini-yolo" beats "yolo".
    """
    base = PurePath(path).name
    for name in sorted(app_names, key=len, reverse=True):
        if base == name or base.endswith(f"-{name}"):
            return name
    return None


class TmuxLayoutBuilder:
    """Builds SessionPane lists from tmux pane data."""

    def __init__(self, app_names: list[str] | None = None):
        """Initialize TmuxLayoutBuilder.

        Args:
            app_names: Configured app names used to recognise worktree paths.
        """
        self._app_names = app_names or []

    def build(self, panes: list[dict]) -> list[SessionPane]:
        """Classify panes, keeping tmux's listing order within each window."""
        by_window: dict[str, list[dict]] = {}
        names: dict[str, str] = {}
        for pane in panes:
            key = pane.get("window_id", "")
            by_window.setdefault(key, []).append(pane)
            names[key] = pane.get("window_name", "")

        result: list[SessionPane] = []
        for key, window_panes in by_window.items():
            window_name = names[key]
            if window_name == config.SINGLE_WINDOW_NAME:
                launchers = self._column_tops(window_panes)
                for pane in window_panes:
                    is_launcher = pane["pane_id"] in launchers
                    result.append(self._make(pane, window_name, self._resolve_app(pane), is_launcher))
            else:
                launcher = min(window_panes, key=lambda p: (p.get("y", 0), p.get("x", 0)))
                for pane in window_panes:
                    result.append(
                        self._make(pane, window_name, window_name, pane["pane_id"] == launcher["pane_id"])
                    )
        return result

    @staticmethod
    def _column_tops(panes: list[dict]) -> set[str]:
        tops: dict[int, dict] = {}
        for pane in panes:
            x = pane.get("x", 0)
            if x not in tops or pane.get("y", 0) < tops[x].get("y", 0):
                tops[x] = pane
        return {pane["pane_id"] for pane in tops.values()}

    def _resolve_app(self, pane: dict) -> str | None:
        path = pane.get("path", "")
        app = app_for_path(path, self._app_names)
        if app is None and path:
            # unknown tool: last dash-separated part of the directory name
            app = PurePath(path).name.rsplit("-", 1)[-1] or None
        return app

    @staticmethod
    def _make(pane: dict, window: str, app_name: str | None, is_launcher: bool) -> SessionPane:
        return SessionPane(
            pane_id=pane["pane_id"],
            window=window,
            app_name=app_name,
            role=PaneRole.LAUNCHER if is_launcher else PaneRole.SHELL,
            current_command=pane.get("current_command", ""),
            path=pane.get("path", ""),
        )
