"""Send text to the panes of a running tmux session.

Prompts go to the AI panes, commands to the shell panes. Panes are found
through ``list-panes`` and classified by TmuxLayoutBuilder; text goes out
with ``send-keys -l`` followed by a separate Enter.
"""

from enum import Enum

from . import config
from .adapters.tmux import SessionPane, TmuxClient, TmuxLayoutBuilder
from .errors import SendTargetError
from .layout.planner import PaneRole
from .models import ProjectConfig
from .telemetry import get_logger

logger = get_logger(__name__)


class MessageKind(str, Enum):
    PROMPT = "prompt"  # AI panes, optional prompt hint
    COMMAND = "command"  # shell panes, sent verbatim

    @property
    def default_role(self) -> PaneRole:
        return PaneRole.LAUNCHER if self is MessageKind.PROMPT else PaneRole.SHELL


def prompt_hint_for(app_name: str | None, project: ProjectConfig | None) -> str:
    """The app's configured hint, else the built-in phrase for it."""
    if project is not None and app_name:
        app = project.find_app(app_name)
        if app is not None and app.prompt_hint:
            return app.prompt_hint
    return config.DEFAULT_PROMPT_HINTS.get(app_name or "", config.FALLBACK_PROMPT_HINT)


def compose(message: str, pane: SessionPane, project: ProjectConfig | None = None, think: bool = False) -> str:
    """Text to send to ``pane``.

    With ``think`` set, launcher panes get the app's prompt hint appended
    after a blank line. Shell panes always get the message unchanged.
    """
    if not think or pane.role != PaneRole.LAUNCHER:
        return message
    return f"{message}\n\n{prompt_hint_for(pane.app_name, project)}"


class Sender:
    """Sends messages to panes of one tmux server.

    Usage:
        sender = Sender(project_config)
        await sender.send_message(None, "run the tests", think=True)
    """

    def __init__(self, project: ProjectConfig | None = None, client: TmuxClient | None = None):
        self.project = project
        self.client = client or TmuxClient()
        self._builder = TmuxLayoutBuilder(project.app_names() if project else [])

    async def list_sessions(self) -> list[str]:
        return await self.client.list_sessions()

    async def list_panes(self, session: str) -> list[SessionPane]:
        return self._builder.build(await self.client.list_panes(session))

    async def resolve_session(self, session: str | None) -> str:
        """Pick the target session.

        Raises:
            SendTargetError: no sessions, unknown name, or several sessions
                and none named
        """
        sessions = await self.list_sessions()
        if not sessions:
            raise SendTargetError("No tmux sessions found. Run 'mai add <branch-prefix>' first.")
        if session is not None:
            if session not in sessions:
                raise SendTargetError(f"Session '{session}' not found")
            return session
        if len(sessions) == 1:
            return sessions[0]
        raise SendTargetError(
            f"Multiple sessions found. Please specify --session. Available: {', '.join(sessions)}"
        )

    async def send_to_pane(self, pane_id: str, text: str, enter: bool = True) -> None:
        await self.client.send_keys(pane_id, text, enter=enter)

    async def send_message(
        self,
        session: str | None,
        message: str,
        pane_ids: list[str] | None = None,
        think: bool = False,
        kind: MessageKind = MessageKind.PROMPT,
    ) -> list[SessionPane]:
        """Send ``message`` to the chosen panes.

        Without ``pane_ids`` a prompt goes to every AI pane and a command to
        every shell pane. Commands never get a prompt hint.

        Returns:
            Panes the message was sent to

        Raises:
            SendTargetError: no session or no matching pane
        """
        target = await self.resolve_session(session)
        panes = await self.list_panes(target)
        if pane_ids:
            wanted = set(pane_ids)
            chosen = [p for p in panes if p.pane_id in wanted]
        else:
            chosen = [p for p in panes if p.role == kind.default_role]
        if not chosen:
            raise SendTargetError(f"No target panes found in session '{target}'")

        think = think and kind is MessageKind.PROMPT
        for pane in chosen:
            logger.debug(f"Sending {kind.value} to {pane.pane_id} ({pane.app_name}, {pane.role.value})")
            await self.send_to_pane(pane.pane_id, compose(message, pane, self.project, think))
        return chosen
