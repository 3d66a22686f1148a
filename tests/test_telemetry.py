"""Tests for telemetry helpers."""

from multiai import config
from multiai.telemetry import Metrics, truncate_command


class TestMetrics:
    def test_counters_with_labels(self):
        m = Metrics()
        m.inc("mux.commands", {"mux": "tmux"})
        m.inc("mux.commands", {"mux": "tmux"}, value=2)
        m.inc("mux.failures")

        assert m.get_counter("mux.commands", {"mux": "tmux"}) == 3
        assert m.get_counter("mux.commands") == 0
        assert m.get_counter("mux.failures") == 1

    def test_reset(self):
        m = Metrics()
        m.inc("worktree.created")
        m.reset()
        assert m.get_all_counters() == {}


def test_truncate_command():
    assert truncate_command(["tmux", "ls"]) == "tmux ls"
    long = truncate_command(["x" * (config.LOG_MAX_CMD_LEN + 10)])
    assert long.endswith("...")
    assert len(long) == config.LOG_MAX_CMD_LEN + 3
