"""Tests for sending text to session panes."""

from unittest.mock import AsyncMock

import pytest

from multiai.adapters.tmux import SessionPane, TmuxClient
from multiai.errors import SendTargetError
from multiai.layout.planner import PaneRole
from multiai.models import ProjectConfig
from multiai.send import MessageKind, Sender, compose, prompt_hint_for

PANES = [
    {"pane_id": "%0", "window_id": "@1", "window_name": "apps", "x": 0, "y": 0,
     "current_command": "claude", "path": "/w/feat-claude"},
    {"pane_id": "%2", "window_id": "@1", "window_name": "apps", "x": 0, "y": 20,
     "current_command": "zsh", "path": "/w/feat-claude"},
    {"pane_id": "%1", "window_id": "@1", "window_name": "apps", "x": 81, "y": 0,
     "current_command": "node", "path": "/w/feat-gemini"},
]


@pytest.fixture
def project():
    return ProjectConfig.model_validate(
        {
            "ai_apps": [
                {"name": "claude", "command": "claude"},
                {"name": "gemini", "command": "gemini", "prompt_hint": "think hard"},
            ]
        }
    )


@pytest.fixture
def client():
    client = AsyncMock(spec=TmuxClient)
    client.list_sessions.return_value = ["myproj-feat"]
    client.list_panes.return_value = PANES
    return client


def _pane(app, role=PaneRole.LAUNCHER):
    return SessionPane("%0", "apps", app, role, "zsh", f"/w/feat-{app}")


class TestCompose:
    def test_configured_hint(self, project):
        assert compose("fix it", _pane("gemini"), project, think=True) == "fix it\n\nthink hard"

    def test_default_hints(self, project):
        assert compose("fix it", _pane("claude"), project, think=True) == "fix it\n\nultrathink"
        assert compose("x", _pane("amp"), None, think=True) == "x\n\nUse oracle and think heavily"
        assert compose("x", _pane("codex"), None, think=True) == "x\n\nThink deeply about this"

    def test_no_think(self, project):
        assert compose("fix it", _pane("claude"), project) == "fix it"

    def test_shell_panes_unchanged(self, project):
        assert compose("ls", _pane("claude", PaneRole.SHELL), project, think=True) == "ls"

    def test_prompt_hint_unknown_app(self):
        assert prompt_hint_for(None, None) == "Think deeply about this"


class TestSender:
    @pytest.mark.asyncio
    async def test_defaults_to_launchers(self, project, client):
        sender = Sender(project, client=client)

        sent = await sender.send_message(None, "run tests", think=True)

        assert [p.pane_id for p in sent] == ["%0", "%1"]
        client.list_panes.assert_awaited_once_with("myproj-feat")
        calls = [c.args for c in client.send_keys.await_args_list]
        assert calls == [("%0", "run tests\n\nultrathink"), ("%1", "run tests\n\nthink hard")]

    @pytest.mark.asyncio
    async def test_command_goes_to_shell_panes_without_hint(self, project, client):
        sender = Sender(project, client=client)

        sent = await sender.send_message(None, "git status", think=True, kind=MessageKind.COMMAND)

        assert [p.pane_id for p in sent] == ["%2"]
        client.send_keys.assert_awaited_once_with("%2", "git status", enter=True)

    @pytest.mark.asyncio
    async def test_explicit_panes(self, project, client):
        sender = Sender(project, client=client)

        sent = await sender.send_message(None, "ls", pane_ids=["%2"])

        assert [p.pane_id for p in sent] == ["%2"]
        client.send_keys.assert_awaited_once_with("%2", "ls", enter=True)

    @pytest.mark.asyncio
    async def test_unknown_pane(self, project, client):
        with pytest.raises(SendTargetError, match="No target panes"):
            await Sender(project, client=client).send_message(None, "ls", pane_ids=["%99"])

    @pytest.mark.asyncio
    async def test_no_sessions(self, client):
        client.list_sessions.return_value = []
        with pytest.raises(SendTargetError, match="No tmux sessions"):
            await Sender(client=client).send_message(None, "hi")

    @pytest.mark.asyncio
    async def test_several_sessions_need_a_name(self, client):
        client.list_sessions.return_value = ["a", "b"]
        with pytest.raises(SendTargetError, match="a, b"):
            await Sender(client=client).resolve_session(None)
        assert await Sender(client=client).resolve_session("b") == "b"

    @pytest.mark.asyncio
    async def test_unknown_session(self, client):
        with pytest.raises(SendTargetError, match="'nope' not found"):
            await Sender(client=client).resolve_session("nope")
