"""Tmux client for subprocess-based tmux interaction."""

import asyncio
import logging

from multiai import config
from multiai.core.ids import is_tmux_pane_id
from multiai.core.registry import Existence
from multiai.errors import MultiplexerCommandFailed
from multiai.layout.planner import SplitDirection
from multiai.telemetry import metrics, truncate_command

logger = logging.getLogger(__name__)

# Use tab as delimiter to avoid conflicts with colons in data (paths, names)
_FIELD_SEP = "\t"

# stderr fragments meaning "there is no such session" rather than "query broke"
_NOT_FOUND_MARKERS = ("can't find session", "no server running", "error connecting to", "session not found")

_SPLIT_FLAGS = {
    SplitDirection.RIGHT: "-h",
    SplitDirection.BELOW: "-v",
}


def exact(session: str) -> str:
    """Exact-match session target (tmux otherwise prefix-matches names)."""
    return f"={session}"


class TmuxClient:
    """Client for interacting with tmux via subprocess commands.

    Provides async methods for:
    - Creating sessions, windows and split panes (returning the new pane id)
    - Sending keys to panes by id
    - Listing sessions and panes
    - Session existence, kill and attach
    """

    def __init__(self, socket_path: str | None = None, binary: str | None = None):
        """Initialize TmuxClient.

        Args:
            socket_path: Optional tmux socket path. If None, uses default socket.
            binary: tmux executable, defaults to ``config.TMUX_BINARY``.
        """
        self._socket_path = socket_path
        self._binary = binary or config.TMUX_BINARY

    def _argv(self, args: tuple[str, ...]) -> list[str]:
        cmd = [self._binary]
        if self._socket_path:
            cmd.extend(["-S", self._socket_path])
        cmd.extend(args)
        return cmd

    async def execute(self, *args: str) -> tuple[int, str, str]:
        """Run a tmux command without interpreting the exit code.

        Returns:
            (returncode, stdout, stderr)

        Raises:
            OSError: tmux could not be started
        """
        cmd = self._argv(args)
        logger.debug(f"tmux: {truncate_command(cmd)}")
        metrics.inc("mux.commands", {"backend": "tmux"})
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await proc.communicate()
        return proc.returncode, stdout.decode(), stderr.decode()

    async def run(self, *args: str) -> str:
        """Execute a tmux command.

        Args:
            *args: Command arguments (e.g., "list-panes", "-s", "-F", "...")

        Returns:
            Command stdout.

        Raises:
            MultiplexerCommandFailed: non-zero exit or tmux not runnable
        """
        command = " ".join(self._argv(args))
        try:
            returncode, stdout, stderr = await self.execute(*args)
        except OSError as e:
            metrics.inc("mux.failures", {"backend": "tmux"})
            logger.error(f"tmux subprocess error: {e}")
            raise MultiplexerCommandFailed(command, str(e)) from e

        if returncode != 0:
            metrics.inc("mux.failures", {"backend": "tmux"})
            logger.warning(f"tmux command failed: {command}: {stderr.strip()}")
            raise MultiplexerCommandFailed(command, stderr)

        return stdout

    async def _run_capturing_pane(self, *args: str) -> str:
        output = await self.run(*args, "-P", "-F", "#{pane_id}")
        pane_id = output.strip()
        if not is_tmux_pane_id(pane_id):
            raise MultiplexerCommandFailed(
                " ".join(self._argv(args)), f"unexpected pane id output: {output!r}"
            )
        return pane_id

    async def has_session(self, session: str) -> Existence:
        """Classify whether a session exists.

        Returns:
            EXISTS, NOT_FOUND (no such session / no server), or QUERY_FAILED
        """
        try:
            returncode, _, stderr = await self.execute("has-session", "-t", exact(session))
        except OSError as e:
            logger.warning(f"tmux not runnable: {e}")
            return Existence.QUERY_FAILED

        if returncode == 0:
            return Existence.EXISTS
        lowered = stderr.lower()
        if any(marker in lowered for marker in _NOT_FOUND_MARKERS):
            return Existence.NOT_FOUND
        logger.warning(f"tmux has-session failed: {stderr.strip()}")
        return Existence.QUERY_FAILED

    async def new_session(self, session: str, window_name: str, cwd: str) -> str:
        """Create a detached session; returns the first pane's id (e.g. "%0")."""
        return await self._run_capturing_pane(
            "new-session", "-d", "-s", session, "-n", window_name, "-c", cwd
        )

    async def new_window(self, session: str, window_name: str, cwd: str) -> str:
        """Append a window to a session; returns its first pane's id."""
        return await self._run_capturing_pane(
            "new-window", "-d", "-t", f"{exact(session)}:", "-n", window_name, "-c", cwd
        )

    async def split_pane(
        self, pane_id: str, direction: SplitDirection, percent: int, cwd: str
    ) -> str:
        """Split ``pane_id``; returns the new pane's id.

        Args:
            pane_id: Pane to split (captured id, never an index)
            direction: RIGHT (side by side) or BELOW (stacked)
            percent: Size of the new pane relative to ``pane_id``
            cwd: Working directory of the new pane
        """
        return await self._run_capturing_pane(
            "split-window", _SPLIT_FLAGS[direction], "-d", "-t", pane_id, "-l", f"{percent}%", "-c", cwd
        )

    async def send_keys(self, pane_id: str, text: str, enter: bool = True) -> None:
        """Type ``text`` literally into a pane, then press Enter.

        Enter is sent as a separate key so it is never taken literally.
        """
        await self.run("send-keys", "-t", pane_id, "-l", text)
        if enter:
            await self.run("send-keys", "-t", pane_id, "Enter")

    async def select_window(self, target: str) -> None:
        """Select a window. A pane id selects the window containing it."""
        await self.run("select-window", "-t", target)

    async def select_pane(self, pane_id: str) -> None:
        await self.run("select-pane", "-t", pane_id)

    async def kill_session(self, session: str) -> None:
        await self.run("kill-session", "-t", exact(session))

    async def list_sessions(self) -> list[str]:
        """Names of all sessions; empty when no server is running."""
        try:
            returncode, stdout, stderr = await self.execute("list-sessions", "-F", "#{session_name}")
        except OSError as e:
            raise MultiplexerCommandFailed(f"{self._binary} list-sessions", str(e)) from e
        if returncode != 0:
            lowered = stderr.lower()
            if any(marker in lowered for marker in _NOT_FOUND_MARKERS):
                return []
            raise MultiplexerCommandFailed(f"{self._binary} list-sessions", stderr)
        return [line for line in stdout.splitlines() if line]

    async def list_panes(self, session: str) -> list[dict]:
        """List all panes of one session.

        Returns:
            List of pane dicts with keys:
            - pane_id: str (e.g., "%0")
            - window_id: str
            - window_name: str
            - x: int, y: int (character position)
            - current_command: str
            - path: str
        """
        fmt = _FIELD_SEP.join([
            "#{pane_id}", "#{window_id}", "#{window_name}",
            "#{pane_left}", "#{pane_top}",
            "#{pane_current_command}", "#{pane_current_path}",
        ])
        output = await self.run("list-panes", "-s", "-t", exact(session), "-F", fmt)

        panes = []
        for line in output.strip().split("\n"):
            if not line:
                continue
            parts = line.split(_FIELD_SEP)
            if len(parts) >= 7:
                try:
                    panes.append(
                        {
                            "pane_id": parts[0],
                            "window_id": parts[1],
                            "window_name": parts[2],
                            "x": int(parts[3]),
                            "y": int(parts[4]),
                            "current_command": parts[5],
                            "path": parts[6],
                        }
                    )
                except ValueError as e:
                    logger.warning(f"Failed to parse pane line: {line!r}: {e}")

        return panes

    async def attach_session(self, session: str, switch: bool = False) -> None:
        """Attach the current terminal to a session.

        Args:
            session: Session name
            switch: Use ``switch-client`` (when already inside tmux)

        Raises:
            MultiplexerCommandFailed: tmux exits non-zero
        """
        verb = "switch-client" if switch else "attach-session"
        cmd = self._argv((verb, "-t", exact(session)))
        logger.debug(f"tmux: {truncate_command(cmd)}")
        metrics.inc("mux.commands", {"backend": "tmux"})
        try:
            # inherit the terminal: attach is interactive
            proc = await asyncio.create_subprocess_exec(*cmd)
            returncode = await proc.wait()
        except OSError as e:
            raise MultiplexerCommandFailed(" ".join(cmd), str(e)) from e
        if returncode != 0:
            raise MultiplexerCommandFailed(" ".join(cmd), f"exit status {returncode}")
