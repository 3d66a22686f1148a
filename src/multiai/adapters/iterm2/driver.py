"""ITerm2Driver - iTerm2 terminal driver

Implements the TerminalDriver protocol on top of the iTerm2 Python API:
one tab per WindowSpec, one column per app, panes stacked in each column.
"""

import logging

import iterm2

from multiai.adapters.base import BoundPane, RealizedLayout, command_script
from multiai.core.ids import AdapterType, PaneHandle
from multiai.core.registry import Existence
from multiai.errors import MultiplexerCommandFailed
from multiai.layout.planner import LayoutPlan, WindowSpec
from multiai.timing import SettlePolicy

from .client import ITerm2Client

logger = logging.getLogger(__name__)


class ITerm2Driver:
    """iTerm2 driver

    Usage:
        driver = ITerm2Driver()
        await driver.connect()
        await driver.realize(layout_plan, "project-feature")
        await driver.disconnect()
    """

    name: str = "iterm2"

    def __init__(self, settle: SettlePolicy | None = None, connection: "iterm2.Connection | None" = None):
        """Initialize the driver.

        Args:
            settle: Wait policy before typing into new panes
            connection: Existing iTerm2 connection; created on connect() if None
        """
        self._settle = settle or SettlePolicy()
        self._connection = connection
        self._owns_connection = False
        self._client: ITerm2Client | None = ITerm2Client(connection) if connection else None

    @property
    def client(self) -> ITerm2Client:
        """Underlying client (after connect())"""
        if self._client is None:
            raise MultiplexerCommandFailed("iterm2", "not connected")
        return self._client

    async def connect(self) -> None:
        """Connect to iTerm2's Python API.

        Raises:
            MultiplexerCommandFailed: iTerm2 not running or API disabled
        """
        if self._client is not None:
            return
        try:
            self._connection = await iterm2.Connection.async_create()
        except Exception as e:
            raise MultiplexerCommandFailed(
                "iterm2 connect",
                f"{e} (is iTerm2 running with the Python API enabled?)",
            ) from e
        self._owns_connection = True
        self._client = ITerm2Client(self._connection)

    async def disconnect(self) -> None:
        """Close the websocket opened by connect(); injected connections stay open."""
        connection, owned = self._connection, self._owns_connection
        self._client = None
        self._connection = None
        self._owns_connection = False
        if connection is None or not owned:
            return
        websocket = getattr(connection, "websocket", None)
        if websocket is None:
            return
        try:
            await websocket.close()
        except Exception as e:
            logger.warning(f"Closing iTerm2 connection failed: {e}")

    async def container_status(self, container: str) -> Existence:
        try:
            tab_id = await self.client.find_tab(container)
        except Exception as e:
            logger.warning(f"iTerm2 tab lookup failed: {e}")
            return Existence.QUERY_FAILED
        return Existence.EXISTS if tab_id else Existence.NOT_FOUND

    async def realize(self, plan: LayoutPlan, container: str, reuse: bool = False) -> RealizedLayout:
        """Open a new tab per window and start the apps.

        iTerm2 tabs are never reused: ``reuse`` still opens a fresh tab next
        to the existing one.
        """
        realized = RealizedLayout(container=container)
        first_launcher: str | None = None
        for window in plan.windows:
            panes = await self._build_tab(window, container)
            if first_launcher is None:
                first_launcher = panes[0].handle.native_id

            await self._settle.settle()
            for handle, text in command_script(panes):
                await self.client.send_text(handle.native_id, text)
            realized.panes.extend(panes)

        if first_launcher is not None:
            await self.client.activate(first_launcher)
        logger.info(f"Realized {len(realized.panes)} panes in iTerm2 tab {container!r}")
        return realized

    async def _build_tab(self, window: WindowSpec, container: str) -> list[BoundPane]:
        client = self.client
        tab_id, first_id = await client.create_tab(container)

        column_ids = [first_id]
        for index in range(1, len(window.columns)):
            column_ids.append(await client.split(column_ids[index - 1], window.columns[index].split))

        bound: list[BoundPane] = []
        for column, top_id in zip(window.columns, column_ids):
            pane_ids = [top_id]
            for index in range(1, len(column.panes)):
                pane_ids.append(await client.split(pane_ids[index - 1], column.panes[index].split))

            for pane, pane_id in zip(column.panes, pane_ids):
                await client.name_session(pane_id, f"{column.app.name}:{pane.role.value}")
                bound.append(
                    BoundPane(
                        handle=PaneHandle(adapter=AdapterType.ITERM2, native_id=pane_id, container=tab_id),
                        window=window.name,
                        app_name=column.app.name,
                        command=column.app.command,
                        role=pane.role,
                        cwd=column.record.path,
                    )
                )

        await client.resize_columns(tab_id, column_ids, window.column_shares())
        return bound

    async def destroy(self, container: str) -> bool:
        """iTerm2 tabs are closed by the user."""
        logger.info(f"iTerm2 tab {container!r} must be closed manually")
        return False

    async def attach(self, container: str) -> None:
        """The tab is already frontmost after realize()."""
