"""iTerm2 API client wrapper"""

import logging

import iterm2

from multiai.adapters.iterm2.naming import get_tab_name, set_session_name, set_tab_name
from multiai.errors import MultiplexerCommandFailed
from multiai.layout.planner import SplitDirection
from multiai.telemetry import metrics

logger = logging.getLogger(__name__)


class ITerm2Client:
    """iTerm2 operations addressed by session id.

    Sessions created here are remembered by id, so later splits and writes
    use the object returned by the creating call rather than a lookup by
    position.
    """

    def __init__(self, connection: iterm2.Connection):
        self.connection = connection
        self._sessions: dict[str, iterm2.Session] = {}
        self._tabs: dict[str, iterm2.Tab] = {}

    async def get_app(self) -> iterm2.App:
        app = await iterm2.async_get_app(self.connection)
        if app is None:
            raise MultiplexerCommandFailed("iterm2 get_app", "iTerm2 app unavailable")
        return app

    def _count(self) -> None:
        metrics.inc("mux.commands", {"backend": "iterm2"})

    def _fail(self, command: str, e: Exception) -> MultiplexerCommandFailed:
        metrics.inc("mux.failures", {"backend": "iterm2"})
        logger.warning(f"iTerm2 {command} failed: {e}")
        return MultiplexerCommandFailed(f"iterm2 {command}", str(e))

    def _session(self, session_id: str) -> iterm2.Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise MultiplexerCommandFailed("iterm2 lookup", f"unknown session {session_id}")
        return session

    async def find_tab(self, name: str) -> str | None:
        """Tab id of the tab whose USER name is ``name``, or None."""
        app = await self.get_app()
        self._count()
        for window in app.windows:
            for tab in window.tabs:
                if await get_tab_name(tab) == name:
                    return tab.tab_id
        return None

    async def create_tab(self, name: str) -> tuple[str, str]:
        """Open a new tab in the current window (or a new window).

        Returns:
            (tab_id, session_id of the tab's only session)
        """
        self._count()
        try:
            app = await self.get_app()
            window = app.current_terminal_window
            if window is None:
                window = await iterm2.Window.async_create(self.connection)
                if window is None:
                    raise RuntimeError("could not create a window")
                tab = window.current_tab
            else:
                tab = await window.async_create_tab()
            await set_tab_name(tab, name)
        except MultiplexerCommandFailed:
            raise
        except Exception as e:
            raise self._fail("create_tab", e) from e

        session = tab.current_session
        self._tabs[tab.tab_id] = tab
        self._sessions[session.session_id] = session
        return tab.tab_id, session.session_id

    async def split(self, session_id: str, direction: SplitDirection) -> str:
        """Split a session; returns the new session's id."""
        session = self._session(session_id)
        self._count()
        try:
            new = await session.async_split_pane(vertical=direction == SplitDirection.RIGHT)
        except Exception as e:
            raise self._fail("split_pane", e) from e
        if new is None:
            raise self._fail("split_pane", RuntimeError("split returned no session"))
        self._sessions[new.session_id] = new
        return new.session_id

    async def send_text(self, session_id: str, text: str) -> None:
        """Type a line into a session."""
        session = self._session(session_id)
        self._count()
        try:
            await session.async_send_text(text + "\n")
        except Exception as e:
            raise self._fail("send_text", e) from e

    async def name_session(self, session_id: str, name: str) -> None:
        self._count()
        try:
            await set_session_name(self._session(session_id), name)
        except MultiplexerCommandFailed:
            raise
        except Exception as e:
            raise self._fail("set_name", e) from e

    async def resize_columns(self, tab_id: str, column_session_ids: list[str], shares: list[int]) -> None:
        """Give each column its width share (best effort).

        iTerm2 halves the pane being split, so chained splits leave unequal
        columns; preferred sizes plus ``async_update_layout`` even them out.
        """
        tab = self._tabs.get(tab_id)
        if tab is None or len(column_session_ids) < 2:
            return
        sessions = [self._session(sid) for sid in column_session_ids]
        total = sum(s.grid_size.width for s in sessions)
        for session, share in zip(sessions, shares):
            width = max(1, round(total * share / 100))
            session.preferred_size = iterm2.util.Size(width, session.grid_size.height)
        self._count()
        try:
            await tab.async_update_layout()
        except Exception as e:
            # column widths are cosmetic; the panes are already usable
            logger.warning(f"iTerm2 layout update failed: {e}")

    async def activate(self, session_id: str) -> None:
        self._count()
        try:
            await self._session(session_id).async_activate()
        except MultiplexerCommandFailed:
            raise
        except Exception as e:
            raise self._fail("activate", e) from e
