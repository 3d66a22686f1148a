"""Tests for the mai command line."""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from multiai.cli import format_relative_time, main
from multiai.errors import SessionAlreadyExists, SendTargetError
from multiai.models import AiApp, TerminalMode
from multiai.picker import PickerResult
from multiai.project import parse_config
from multiai.send import MessageKind
from multiai.worktree import PrefixGroup


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def orchestrator():
    orch = MagicMock()
    orch.add = AsyncMock()
    orch.continue_ = AsyncMock()
    orch.remove = AsyncMock(return_value=["feature-claude", "feature-gemini"])
    orch.list_environments.return_value = []
    with patch("multiai.cli._orchestrator", return_value=orch):
        yield orch


class TestCommands:
    def test_add_passes_mode(self, runner, linux_env, orchestrator):
        result = runner.invoke(main, ["add", "feature", "--mode", "TMUX-MULTI-WINDOW"], obj=linux_env)

        assert result.exit_code == 0, result.output
        orchestrator.add.assert_awaited_once_with(
            "feature", mode_override=TerminalMode.TMUX_MULTI_WINDOW, force=False
        )

    def test_bad_mode_is_usage_error(self, runner, linux_env, orchestrator):
        result = runner.invoke(main, ["add", "feature", "--mode", "screen"], obj=linux_env)

        assert result.exit_code == 2
        orchestrator.add.assert_not_called()

    def test_classified_error_exits_1(self, runner, linux_env, orchestrator):
        orchestrator.add.side_effect = SessionAlreadyExists("myproj-feature")

        result = runner.invoke(main, ["add", "feature"], obj=linux_env)

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "myproj-feature" in result.output

    def test_resume_is_continue(self, runner, linux_env, orchestrator):
        assert runner.invoke(main, ["resume", "feature"], obj=linux_env).exit_code == 0
        assert runner.invoke(main, ["continue", "feature"], obj=linux_env).exit_code == 0
        assert orchestrator.continue_.await_count == 2

    def test_remove_reports_count(self, runner, linux_env, orchestrator):
        result = runner.invoke(main, ["remove", "feature", "--force"], obj=linux_env)

        assert result.exit_code == 0, result.output
        assert "2 worktrees" in result.output
        assert orchestrator.remove.await_args.kwargs["force"] is True

    def test_list_table(self, runner, linux_env, orchestrator):
        orchestrator.list_environments.return_value = [
            PrefixGroup("feat", ["feat-claude", "feat-gemini"], datetime.now() - timedelta(hours=3)),
            PrefixGroup("scratch", ["scratch"], None),
        ]

        result = runner.invoke(main, ["list"], obj=linux_env)

        assert result.exit_code == 0, result.output
        assert "claude, gemini" in result.output
        assert "3h ago" in result.output
        assert "scratch" in result.output

    def test_list_empty(self, runner, linux_env, orchestrator):
        result = runner.invoke(main, ["list"], obj=linux_env)
        assert "No worktrees found." in result.output

    def test_init_yes(self, runner, linux_env):
        (linux_env.cwd / "multi-ai-config.jsonc").unlink()

        result = runner.invoke(main, ["init", "--yes"], obj=linux_env)

        assert result.exit_code == 0, result.output
        config = parse_config((linux_env.cwd / "multi-ai-config.jsonc").read_text())
        assert config.app_names() == ["claude", "gemini"]

    def test_version_short_flag(self, runner):
        result = runner.invoke(main, ["-v"])

        assert result.exit_code == 0
        assert "version" in result.output

    def test_remove_short_force(self, runner, linux_env, orchestrator):
        result = runner.invoke(main, ["remove", "feature", "-f"], obj=linux_env)

        assert result.exit_code == 0, result.output
        assert orchestrator.remove.await_args.kwargs["force"] is True

    @pytest.mark.parametrize(
        "args,flow",
        [
            (["add", "feature"], "add"),
            (["continue", "feature"], "continue_"),
            (["resume", "feature"], "continue_"),
            (["remove", "feature", "-f"], "remove"),
        ],
    )
    def test_tmux_flag_is_multi_window(self, runner, linux_env, orchestrator, args, flow):
        result = runner.invoke(main, [*args, "--tmux"], obj=linux_env)

        assert result.exit_code == 0, result.output
        assert getattr(orchestrator, flow).await_args.kwargs["mode_override"] == TerminalMode.TMUX_MULTI_WINDOW

    def test_tmux_flag_conflicts_with_mode(self, runner, linux_env, orchestrator):
        result = runner.invoke(main, ["add", "feature", "--tmux", "--mode", "iterm2"], obj=linux_env)

        assert result.exit_code == 2
        assert "cannot be used together" in result.output
        orchestrator.add.assert_not_called()

    def test_add_without_prefix_uses_picker(self, runner, linux_env, orchestrator):
        codex = AiApp(name="codex", command="codex")
        orchestrator.picker_apps.return_value = [AiApp(name="claude", command="claude"), codex]
        with patch("multiai.cli.AppPicker") as picker_cls:
            picker_cls.return_value.run.return_value = PickerResult("spike", [codex])
            result = runner.invoke(main, ["add"], obj=linux_env)

        assert result.exit_code == 0, result.output
        orchestrator.add.assert_awaited_once_with("spike", mode_override=None, force=False, apps=[codex])

    def test_add_picker_cancelled(self, runner, linux_env, orchestrator):
        orchestrator.picker_apps.return_value = [AiApp(name="claude", command="claude")]
        with patch("multiai.cli.AppPicker") as picker_cls:
            picker_cls.return_value.run.return_value = None
            result = runner.invoke(main, ["add"], obj=linux_env)

        assert "Cancelled." in result.output
        orchestrator.add.assert_not_called()

    def test_remove_without_prefix_uses_picker(self, runner, linux_env, orchestrator):
        orchestrator.list_environments.return_value = [
            PrefixGroup("feat", ["feat-claude"], None),
            PrefixGroup("fix", ["fix-claude"], None),
        ]
        with patch("multiai.cli.PrefixPicker") as picker_cls:
            picker_cls.return_value.run.return_value = ["feat", "fix"]
            result = runner.invoke(main, ["remove", "--force"], obj=linux_env)

        assert result.exit_code == 0, result.output
        assert [c.args[0] for c in orchestrator.remove.await_args_list] == ["feat", "fix"]

    def test_remove_without_prefix_nothing_found(self, runner, linux_env, orchestrator):
        result = runner.invoke(main, ["remove"], obj=linux_env)

        assert "No worktree prefixes found." in result.output
        orchestrator.remove.assert_not_called()


class TestOpenCommands:
    def test_config_opens_project_config(self, runner, linux_env):
        with patch("multiai.cli.subprocess.Popen") as popen:
            result = runner.invoke(main, ["config"], obj=linux_env)

        assert result.exit_code == 0, result.output
        assert popen.call_args.args[0] == ["xdg-open", str(linux_env.cwd / "multi-ai-config.jsonc")]

    def test_config_without_project(self, runner, linux_env):
        (linux_env.cwd / "multi-ai-config.jsonc").unlink()
        with patch("multiai.cli.subprocess.Popen") as popen:
            result = runner.invoke(main, ["config"], obj=linux_env)

        assert result.exit_code == 1
        popen.assert_not_called()

    def test_opener_missing(self, runner, linux_env):
        with patch("multiai.cli.subprocess.Popen", side_effect=FileNotFoundError("xdg-open")):
            result = runner.invoke(main, ["config"], obj=linux_env)

        assert result.exit_code == 1
        assert "Failed to open" in result.output

    def test_apps_creates_catalog_then_opens(self, runner, linux_env):
        catalog_file = linux_env.home / ".config" / "multi-ai-cli" / "apps.jsonc"
        with patch("multiai.cli.subprocess.Popen") as popen:
            result = runner.invoke(main, ["apps"], obj=linux_env)
            second = runner.invoke(main, ["apps"], obj=linux_env)

        assert result.exit_code == 0, result.output
        assert "Created" in result.output
        assert "Created" not in second.output
        assert catalog_file.is_file()
        assert popen.call_args.args[0] == ["xdg-open", str(catalog_file)]


class TestSendCommand:
    def test_sends_with_flags(self, runner, linux_env):
        sender = MagicMock()
        sender.send_message = AsyncMock(return_value=[object(), object()])
        with patch("multiai.cli.Sender", return_value=sender) as sender_cls:
            result = runner.invoke(
                main, ["send", "-s", "myproj-feat", "-m", "hello", "--pane", "%1", "--think"], obj=linux_env
            )

        assert result.exit_code == 0, result.output
        assert "2 pane(s)" in result.output
        assert sender_cls.call_args.args[0].app_names() == ["claude", "gemini"]
        sender.send_message.assert_awaited_once_with(
            "myproj-feat", "hello", ["%1"], think=True, kind=MessageKind.PROMPT
        )

    def test_blank_message(self, runner, linux_env):
        with patch("multiai.cli.Sender") as sender_cls:
            result = runner.invoke(main, ["send"], input="   \n", obj=linux_env)

        assert result.exit_code == 0, result.output
        assert "Nothing to send." in result.output
        sender_cls.assert_not_called()

    def test_target_error(self, runner, linux_env):
        sender = MagicMock()
        sender.send_message = AsyncMock(side_effect=SendTargetError("No tmux sessions found."))
        with patch("multiai.cli.Sender", return_value=sender):
            result = runner.invoke(main, ["send", "-m", "hi"], obj=linux_env)

        assert result.exit_code == 1
        assert "No tmux sessions found." in result.output

    def test_command_flag(self, runner, linux_env):
        sender = MagicMock()
        sender.send_message = AsyncMock(return_value=[object()])
        with patch("multiai.cli.Sender", return_value=sender):
            result = runner.invoke(main, ["send", "-m", "git status", "--command"], obj=linux_env)

        assert result.exit_code == 0, result.output
        assert "Sent command to 1 pane(s)" in result.output
        assert sender.send_message.await_args.kwargs["kind"] == MessageKind.COMMAND


class TestFormatRelativeTime:
    NOW = datetime(2025, 6, 1, 12, 0, 0)

    @pytest.mark.parametrize(
        "delta,expected",
        [
            (timedelta(seconds=5), "just now"),
            (timedelta(minutes=12), "12m ago"),
            (timedelta(hours=5), "5h ago"),
            (timedelta(days=2), "2d ago"),
            (timedelta(days=21), "3w ago"),
        ],
    )
    def test_buckets(self, delta, expected):
        assert format_relative_time(self.NOW - delta, self.NOW) == expected

    def test_unknown(self):
        assert format_relative_time(None) == "-"
