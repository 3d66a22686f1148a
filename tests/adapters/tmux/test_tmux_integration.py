"""TmuxDriver against a real tmux server on a private socket."""

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from multiai.adapters.tmux import TmuxDriver
from multiai.core.naming import session_name
from multiai.core.registry import Existence
from multiai.layout import PaneRole, plan
from multiai.models import AiApp, TerminalMode, WorktreeRecord
from multiai.timing import NO_WAIT

pytestmark = pytest.mark.skipif(shutil.which("tmux") is None, reason="tmux not installed")


@pytest.fixture
def socket_path(tmp_path: Path):
    path = tmp_path / "tmux.sock"
    yield str(path)
    subprocess.run(["tmux", "-S", str(path), "kill-server"], capture_output=True)


@pytest.fixture
def records(tmp_path: Path) -> list[WorktreeRecord]:
    result = []
    for name in ["claude", "gemini"]:
        path = tmp_path / "example.com" / f"feat-{name}"
        path.mkdir(parents=True)
        result.append(WorktreeRecord(app=AiApp(name=name, command=f"echo {name}"), branch_name=path.name, path=path))
    return result


def _driver(socket_path: str) -> TmuxDriver:
    return TmuxDriver(settle=NO_WAIT, socket_path=socket_path)


class TestRealTmux:
    @pytest.mark.asyncio
    async def test_single_window_with_dotted_project(self, socket_path, records):
        driver = _driver(socket_path)
        name = session_name("example.com", "feat")
        layout = plan(records, TerminalMode.TMUX_SINGLE_WINDOW, 2)

        realized = await driver.realize(layout, name)

        assert await driver.client.list_sessions() == [name]
        assert await driver.container_status(name) == Existence.EXISTS

        panes = await driver.client.list_panes(name)
        assert {p["pane_id"] for p in panes} == {b.handle.native_id for b in realized.panes}
        assert {p["window_name"] for p in panes} == {"apps"}

        by_id = {p["pane_id"]: p for p in panes}
        tops = [by_id[realized.handle_for(app).native_id] for app in ("claude", "gemini")]
        assert tops[0]["x"] < tops[1]["x"]
        assert all(p["y"] == 0 for p in tops)
        for app, record in zip(("claude", "gemini"), records):
            shell = by_id[realized.handle_for(app, PaneRole.SHELL).native_id]
            assert shell["x"] == by_id[realized.handle_for(app).native_id]["x"]
            assert shell["y"] > 0
            assert os.path.realpath(shell["path"]) == os.path.realpath(record.path)

    @pytest.mark.asyncio
    async def test_multi_window_and_reuse(self, socket_path, records):
        driver = _driver(socket_path)
        name = session_name("example.com", "feat")
        layout = plan(records, TerminalMode.TMUX_MULTI_WINDOW, 2)

        await driver.realize(layout, name)
        panes = await driver.client.list_panes(name)
        assert sorted({p["window_name"] for p in panes}) == ["claude", "gemini"]
        assert len(panes) == 4

        # continue on a live session adds windows instead of failing on new-session
        await driver.realize(layout, name, reuse=True)
        assert len(await driver.client.list_panes(name)) == 8
        assert await driver.client.list_sessions() == [name]

    @pytest.mark.asyncio
    async def test_destroy(self, socket_path, records):
        driver = _driver(socket_path)
        name = session_name("example.com", "feat")
        await driver.realize(plan(records, TerminalMode.TMUX_SINGLE_WINDOW, 1), name)

        assert await driver.destroy(name)
        assert await driver.container_status(name) == Existence.NOT_FOUND
