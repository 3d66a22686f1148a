"""Terminal driver interface

One capability, two implementations (tmux, iTerm2), selected at startup by
the factory. The interface is a structural Protocol; implementations do not
inherit from anything.

Contract shared by every driver:
1. Minimal surface: status / realize / destroy / attach
2. Every pane handle is captured from the command that created the pane
3. Async IO, but every call is awaited in order
"""

import shlex
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from ..core.ids import PaneHandle
from ..core.registry import Existence
from ..layout.planner import LayoutPlan, PaneRole


@dataclass(frozen=True)
class BoundPane:
    """A realized pane bound to its app and worktree.

    Attributes:
        handle: Stable id captured at creation
        window: Name of the window/tab holding the pane
        app_name: App the pane's column belongs to
        command: App launch command
        role: LAUNCHER or SHELL
        cwd: Worktree path
    """

    handle: PaneHandle
    window: str
    app_name: str
    command: str
    role: PaneRole
    cwd: Path


@dataclass
class RealizedLayout:
    """Result of realizing a LayoutPlan."""

    container: str
    panes: list[BoundPane] = field(default_factory=list)

    def launchers(self) -> list[BoundPane]:
        return [p for p in self.panes if p.role == PaneRole.LAUNCHER]

    def handle_for(self, app_name: str, role: PaneRole = PaneRole.LAUNCHER) -> PaneHandle | None:
        for pane in self.panes:
            if pane.app_name == app_name and pane.role == role:
                return pane.handle
        return None


def command_script(panes: list[BoundPane]) -> Iterator[tuple[PaneHandle, str]]:
    """Text to type into realized panes, in send order.

    ``cd <worktree>`` goes to every pane first, then the launch command to
    launcher panes only.
    """
    for pane in panes:
        yield pane.handle, f"cd {shlex.quote(str(pane.cwd))}"
    for pane in panes:
        if pane.role == PaneRole.LAUNCHER:
            yield pane.handle, pane.command


@runtime_checkable
class TerminalDriver(Protocol):
    """Terminal driver protocol

    Usage:
        driver = create_driver(mode, env)
        await driver.connect()
        if await driver.container_status(name) == Existence.NOT_FOUND:
            realized = await driver.realize(layout_plan, name)
        await driver.attach(name)
        await driver.disconnect()
    """

    name: str

    async def connect(self) -> None:
        """Open the backend connection.

        Raises:
            MultiplexerCommandFailed: backend unreachable
        """
        ...

    async def disconnect(self) -> None:
        ...

    async def container_status(self, container: str) -> Existence:
        """Whether the named session/tab exists."""
        ...

    async def realize(self, plan: LayoutPlan, container: str, reuse: bool = False) -> RealizedLayout:
        """Create windows and panes for ``plan`` and start the apps.

        Args:
            plan: Layout to build
            container: Session/tab name
            reuse: Add windows to an existing container instead of creating it

        Raises:
            MultiplexerCommandFailed: on the first failing command; panes
                created so far are left in place
        """
        ...

    async def destroy(self, container: str) -> bool:
        """Remove the container. Returns False when the backend cannot."""
        ...

    async def attach(self, container: str) -> None:
        """Bring the container to the foreground."""
        ...
