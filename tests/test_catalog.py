"""Tests for the global AI tool catalog."""

import pytest

from multiai import catalog
from multiai.errors import ConfigParseError


class TestParseApps:
    def test_array_or_object(self):
        listed = catalog.parse_apps('[{"name": "claude", "command": "claude"}]')
        wrapped = catalog.parse_apps('{"apps": [{"name": "claude", "command": "claude"}]}')

        assert listed == wrapped
        assert listed[0].default is False

    def test_comments_and_trailing_commas(self):
        apps = catalog.parse_apps(
            """{
              // mine
              "apps": [
                {"name": "amp", "command": "amp", "default": true, "description": "Amp"},
              ]
            }"""
        )
        assert [(a.name, a.default, a.description) for a in apps] == [("amp", True, "Amp")]

    def test_invalid_entry(self):
        with pytest.raises(ConfigParseError, match="apps.jsonc"):
            catalog.parse_apps('[{"name": "claude"}]', "apps.jsonc")

    def test_malformed_json(self):
        with pytest.raises(ConfigParseError):
            catalog.parse_apps("[{", "apps.jsonc")


class TestLoadApps:
    def test_missing_file(self, linux_env):
        assert catalog.load_apps(linux_env) == []

    def test_broken_file_is_ignored(self, linux_env):
        path = catalog.apps_path(linux_env)
        path.parent.mkdir(parents=True)
        path.write_text("not json")

        assert catalog.load_apps(linux_env) == []

    def test_find_app(self):
        apps = catalog.parse_apps('[{"name": "claude", "command": "claude"}, {"name": "amp", "command": "amp"}]')
        assert catalog.find_app(apps, "amp").command == "amp"
        assert catalog.find_app(apps, "codex") is None


class TestEnsureAppsFile:
    def test_creates_defaults_once(self, linux_env):
        path, created = catalog.ensure_apps_file(linux_env)

        assert created is True
        assert path == linux_env.home / ".config" / "multi-ai-cli" / "apps.jsonc"
        apps = catalog.load_apps(linux_env)
        names = [a.name for a in apps]
        assert names[:4] == ["claude", "claude-yolo", "gemini", "gemini-yolo"]
        assert catalog.find_app(apps, "gemini-yolo").command == "gemini --yolo"
        assert [a.name for a in apps if a.default] == ["claude", "gemini"]

        path.write_text('[{"name": "mine", "command": "mine"}]')
        assert catalog.ensure_apps_file(linux_env) == (path, False)
        assert [a.name for a in catalog.load_apps(linux_env)] == ["mine"]
