"""Tmux driver implementing the TerminalDriver protocol."""

import logging

from multiai.adapters.base import BoundPane, RealizedLayout, command_script
from multiai.core.ids import AdapterType, PaneHandle
from multiai.core.registry import Existence
from multiai.layout.planner import LayoutPlan, WindowSpec, split_percent
from multiai.timing import SettlePolicy

from .client import TmuxClient

logger = logging.getLogger(__name__)


class TmuxDriver:
    """Tmux driver.

    Builds sessions, windows and panes with TmuxClient. Every split targets
    the pane id returned by the previous create/split command, so tmux's
    positional indices (and ``base-index``/``pane-base-index`` settings) never
    matter.
    """

    name: str = "tmux"

    def __init__(
        self,
        settle: SettlePolicy | None = None,
        socket_path: str | None = None,
        attach_with_switch: bool = False,
    ):
        """Initialize TmuxDriver.

        Args:
            settle: Wait policy before typing into new panes
            socket_path: Optional tmux socket path
            attach_with_switch: Use switch-client instead of attach-session
                (set when already running inside tmux)
        """
        self._client = TmuxClient(socket_path=socket_path)
        self._settle = settle or SettlePolicy()
        self._attach_with_switch = attach_with_switch

    @property
    def client(self) -> TmuxClient:
        """Access underlying TmuxClient."""
        return self._client

    async def connect(self) -> None:
        """Nothing to open; every call is a separate tmux process."""

    async def disconnect(self) -> None:
        pass

    async def container_status(self, container: str) -> Existence:
        return await self._client.has_session(container)

    async def realize(self, plan: LayoutPlan, container: str, reuse: bool = False) -> RealizedLayout:
        """Create the session (or add windows to it) and start the apps.

        Windows are built one at a time: structural splits, settle, then
        commands. A failure leaves earlier windows running.
        """
        realized = RealizedLayout(container=container)
        session_exists = False
        if reuse:
            session_exists = await self._client.has_session(container) == Existence.EXISTS

        first_pane: str | None = None
        for window in plan.windows:
            panes = await self._build_window(window, container, session_exists)
            session_exists = True
            if first_pane is None:
                first_pane = panes[0].handle.native_id

            await self._settle.settle()
            for handle, text in command_script(panes):
                await self._client.send_keys(handle.native_id, text)
            realized.panes.extend(panes)

        if first_pane is not None:
            await self._client.select_window(first_pane)
            await self._client.select_pane(first_pane)

        logger.info(f"Realized {len(realized.panes)} panes in tmux session {container!r}")
        return realized

    async def _build_window(
        self, window: WindowSpec, container: str, session_exists: bool
    ) -> list[BoundPane]:
        first_cwd = str(window.columns[0].record.path)
        if session_exists:
            first_id = await self._client.new_window(container, window.name, first_cwd)
        else:
            first_id = await self._client.new_session(container, window.name, first_cwd)

        # Column tops: each split targets the previous column's captured id
        column_ids = [first_id]
        shares = window.column_shares()
        for index in range(1, len(window.columns)):
            column = window.columns[index]
            new_id = await self._client.split_pane(
                column_ids[index - 1], column.split, split_percent(shares, index), str(column.record.path)
            )
            column_ids.append(new_id)

        bound: list[BoundPane] = []
        for column, top_id in zip(window.columns, column_ids):
            pane_ids = [top_id]
            pane_shares = column.pane_shares()
            for index in range(1, len(column.panes)):
                new_id = await self._client.split_pane(
                    pane_ids[index - 1],
                    column.panes[index].split,
                    split_percent(pane_shares, index),
                    str(column.record.path),
                )
                pane_ids.append(new_id)

            for pane, pane_id in zip(column.panes, pane_ids):
                bound.append(
                    BoundPane(
                        handle=PaneHandle(adapter=AdapterType.TMUX, native_id=pane_id, container=container),
                        window=window.name,
                        app_name=column.app.name,
                        command=column.app.command,
                        role=pane.role,
                        cwd=column.record.path,
                    )
                )
        return bound

    async def destroy(self, container: str) -> bool:
        await self._client.kill_session(container)
        return True

    async def attach(self, container: str) -> None:
        await self._client.attach_session(container, switch=self._attach_with_switch)
