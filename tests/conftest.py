"""Pytest configuration and shared fixtures"""

import io
from pathlib import Path

import pytest
from rich.console import Console

from multiai.environment import Environment
from multiai.models import AiApp, WorktreeRecord
from multiai.telemetry import metrics

CONFIG_TEXT = """{
  // two apps, two panes each
  "terminals_per_column": 2,
  "mode": "tmux-single-window",
  "ai_apps": [
    {"name": "claude", "command": "claude"},
    {"name": "gemini", "command": "gemini --yolo", "ultrathink": "think hard"},
  ]
}
"""


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A gwt-style project directory holding a multiai config."""
    project = tmp_path / "myproj"
    project.mkdir()
    (project / "multi-ai-config.jsonc").write_text(CONFIG_TEXT)
    return project


@pytest.fixture
def linux_env(project_dir: Path, tmp_path: Path) -> Environment:
    return Environment(cwd=project_dir, os_kind="Linux", home=tmp_path / "home", variables={})


@pytest.fixture
def quiet_console() -> Console:
    return Console(file=io.StringIO(), width=120)


def _make_records(names: list[str], prefix: str = "feature", base: Path = Path("/work/proj")) -> list[WorktreeRecord]:
    return [
        WorktreeRecord(
            app=AiApp(name=name, command=name),
            branch_name=f"{prefix}-{name}",
            path=base / f"{prefix}-{name}",
        )
        for name in names
    ]


@pytest.fixture
def make_records():
    """Factory: WorktreeRecords for apps whose command equals their name."""
    return _make_records
