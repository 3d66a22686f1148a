"""Layout planner

Maps (worktrees, mode, panes per column) to an ordered geometry plan. Pure:
identical inputs always give an identical plan, and nothing here talks to a
terminal.

Mode mapping:
- tmux-multi-window: one window per app, one column, panes side by side
- tmux-single-window / iterm2: one window, one column per app, panes
  stacked top to bottom inside each column
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .. import config
from ..errors import EmptyConfiguration, InvalidPaneCount
from ..models import AiApp, TerminalMode, WorktreeRecord


class PaneRole(Enum):
    LAUNCHER = "launcher"
    SHELL = "shell"


class SplitDirection(Enum):
    """Where the new pane goes relative to the pane being split."""

    RIGHT = "right"  # side by side (tmux -h, iTerm2 vertical divider)
    BELOW = "below"  # stacked (tmux -v, iTerm2 horizontal divider)


@dataclass(frozen=True)
class PaneSpec:
    """One pane.

    Attributes:
        role: LAUNCHER runs the app command, SHELL is left for the user
        split: Direction this pane is split off its predecessor; None for
            the column's first pane
        size_percent: Share of the column (sums to 100 per column)
    """

    role: PaneRole
    split: SplitDirection | None
    size_percent: int


@dataclass(frozen=True)
class ColumnSpec:
    """One app's group of panes, bound to that app's worktree."""

    record: WorktreeRecord
    width_percent: int
    split: SplitDirection | None
    panes: tuple[PaneSpec, ...]

    @property
    def app(self) -> AiApp:
        return self.record.app

    def pane_shares(self) -> list[int]:
        return [p.size_percent for p in self.panes]


@dataclass(frozen=True)
class WindowSpec:
    name: str
    columns: tuple[ColumnSpec, ...]

    def column_shares(self) -> list[int]:
        return [c.width_percent for c in self.columns]


@dataclass(frozen=True)
class LayoutPlan:
    mode: TerminalMode
    panes_per_column: int
    windows: tuple[WindowSpec, ...]

    def columns(self) -> list[ColumnSpec]:
        return [column for window in self.windows for column in window.columns]

    def pane_count(self) -> int:
        return sum(len(column.panes) for column in self.columns())


def distribute(total: int, parts: int) -> list[int]:
    """Split ``total`` into ``parts`` integer shares that sum exactly to it.

    The remainder goes one unit at a time to the leftmost shares:
    distribute(100, 3) == [34, 33, 33].
    """
    if parts < 1:
        raise ValueError("parts must be positive")
    base, remainder = divmod(total, parts)
    return [base + 1 if i < remainder else base for i in range(parts)]


def split_percent(shares: Sequence[int], index: int) -> int:
    """Size of the pane created at ``index``, as a percent of the pane it splits.

    Panes are created as a chain: pane ``index`` is split off pane
    ``index - 1``, which at that moment still covers ``shares[index-1:]``.
    """
    if index < 1 or index >= len(shares):
        raise ValueError(f"index {index} out of range for {len(shares)} shares")
    remaining = sum(shares[index - 1:])
    new = sum(shares[index:])
    percent = round(100 * new / remaining)
    return min(99, max(1, percent))


def _panes(count: int, direction: SplitDirection) -> tuple[PaneSpec, ...]:
    shares = distribute(100, count)
    return tuple(
        PaneSpec(
            role=PaneRole.LAUNCHER if i == 0 else PaneRole.SHELL,
            split=None if i == 0 else direction,
            size_percent=shares[i],
        )
        for i in range(count)
    )


def plan(
    records: Sequence[WorktreeRecord],
    mode: TerminalMode,
    panes_per_column: int,
    window_name: str | None = None,
) -> LayoutPlan:
    """Compute the layout for ``records`` in config order.

    Args:
        records: One worktree per app, in config order
        mode: Terminal mode
        panes_per_column: Panes per app (first is the launcher)
        window_name: Name of the shared window in single-window modes
            (defaults to "apps")

    Raises:
        EmptyConfiguration: no records
        InvalidPaneCount: panes_per_column < 1
    """
    if not records:
        raise EmptyConfiguration()
    if panes_per_column < 1:
        raise InvalidPaneCount(panes_per_column)

    if mode == TerminalMode.TMUX_MULTI_WINDOW:
        windows = tuple(
            WindowSpec(
                name=record.app_name,
                columns=(
                    ColumnSpec(
                        record=record,
                        width_percent=100,
                        split=None,
                        panes=_panes(panes_per_column, SplitDirection.RIGHT),
                    ),
                ),
            )
            for record in records
        )
        return LayoutPlan(mode=mode, panes_per_column=panes_per_column, windows=windows)

    widths = distribute(100, len(records))
    columns = tuple(
        ColumnSpec(
            record=record,
            width_percent=widths[i],
            split=None if i == 0 else SplitDirection.RIGHT,
            panes=_panes(panes_per_column, SplitDirection.BELOW),
        )
        for i, record in enumerate(records)
    )
    window = WindowSpec(name=window_name or config.SINGLE_WINDOW_NAME, columns=columns)
    return LayoutPlan(mode=mode, panes_per_column=panes_per_column, windows=(window,))
