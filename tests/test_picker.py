"""Tests for the interactive add/remove pickers."""

import io
from unittest.mock import patch

import pytest
from rich.console import Console

from multiai.models import AiApp
from multiai.picker import AppPicker, PrefixPicker, parse_selection
from multiai.worktree import PrefixGroup

APPS = [
    AiApp(name="claude", command="claude", default=True),
    AiApp(name="codex", command="codex", description="Codex CLI: Standard"),
    AiApp(name="gemini", command="gemini --yolo", default=True),
]


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=120)


class TestParseSelection:
    def test_commas_and_spaces(self):
        assert parse_selection("3, 1 3", 3) == [2, 0]

    def test_empty(self):
        assert parse_selection("", 3) == []

    @pytest.mark.parametrize("text", ["0", "4", "x", "1-2"])
    def test_out_of_range(self, text):
        with pytest.raises(ValueError):
            parse_selection(text, 3)


class TestAppPicker:
    def test_defaults_preselected(self, console):
        with patch("multiai.picker.Prompt.ask", side_effect=["feat", "1,3"]) as ask:
            result = AppPicker(APPS, console).run()

        assert ask.call_args_list[1].kwargs["default"] == "1,3"
        assert result.prefix == "feat"
        assert [a.name for a in result.apps] == ["claude", "gemini"]
        output = console.file.getvalue()
        assert "[x] 1. claude: claude" in output
        assert "[ ] 2. codex: codex" in output

    def test_reasks_after_bad_input(self, console):
        with patch("multiai.picker.Prompt.ask", side_effect=[" feat ", "9", "2"]):
            result = AppPicker(APPS, console).run()

        assert [a.name for a in result.apps] == ["codex"]
        assert "between 1 and 3" in console.file.getvalue()

    def test_empty_prefix_cancels(self, console):
        with patch("multiai.picker.Prompt.ask", return_value=""):
            assert AppPicker(APPS, console).run() is None


class TestPrefixPicker:
    def test_selects_prefixes(self, console):
        groups = [PrefixGroup("feat", ["feat-claude", "feat-codex"]), PrefixGroup("scratch", ["scratch"])]
        with patch("multiai.picker.Prompt.ask", return_value="2 1"):
            assert PrefixPicker(groups, console).run() == ["scratch", "feat"]

        assert "claude, codex" in console.file.getvalue()

    def test_nothing_picked(self, console):
        with patch("multiai.picker.Prompt.ask", return_value=""):
            assert PrefixPicker([PrefixGroup("feat", ["feat-claude"])], console).run() == []
