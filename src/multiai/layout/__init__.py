"""Layout planning"""

from .planner import (
    ColumnSpec,
    LayoutPlan,
    PaneRole,
    PaneSpec,
    SplitDirection,
    WindowSpec,
    distribute,
    plan,
    split_percent,
)

__all__ = [
    "ColumnSpec",
    "LayoutPlan",
    "PaneRole",
    "PaneSpec",
    "SplitDirection",
    "WindowSpec",
    "distribute",
    "plan",
    "split_percent",
]
