"""
Unit tests for production implementations.

subprocess is patched; the JSON stores use a tmp directory.
"""

import json
import subprocess
from unittest.mock import MagicMock, patch

from taskgrid.implementations import (
    JsonPaneStore,
    JsonTaskStore,
    SubprocessTransport,
    read_json,
    write_json,
)
from taskgrid.models import PaneRecord, PaneRole
from taskgrid.protocols import PaneStore, TaskStore, TmuxTransport


class TestSubprocessTransport:
    """Test SubprocessTransport."""

    def test_implements_protocol(self):
        assert isinstance(SubprocessTransport(), TmuxTransport)

    def test_runs_tmux_with_timeout(self):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="%1\n", stderr="")
            result = SubprocessTransport().run(["display-message", "-p", "#{pane_id}"], timeout=2.0)

        assert result.ok
        assert result.stdout == "%1\n"
        args, kwargs = mock_run.call_args
        assert args[0] == ["tmux", "display-message", "-p", "#{pane_id}"]
        assert kwargs["timeout"] == 2.0

    def test_socket_name_adds_flag(self):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
            SubprocessTransport(socket_name="test-sock").run(["list-windows"], timeout=1.0)
        assert mock_run.call_args[0][0][:3] == ["tmux", "-L", "test-sock"]

    def test_timeout_reported_not_raised(self):
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired(["tmux"], 1.0)):
            result = SubprocessTransport().run(["list-windows"], timeout=1.0)
        assert result.timed_out is True
        assert result.ok is False

    def test_missing_binary_reported_not_raised(self):
        with patch("subprocess.run", side_effect=FileNotFoundError("tmux")):
            result = SubprocessTransport().run(["list-windows"], timeout=1.0)
        assert result.returncode is None
        assert "tmux" in result.stderr

    def test_stdout_dropped_without_capture(self):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="noise", stderr="")
            result = SubprocessTransport().run(["select-pane", "-t", "%1"], timeout=1.0, capture=False)
        assert result.stdout == ""


class TestJsonHelpers:
    """Test read_json/write_json."""

    def test_missing_file(self, tmp_path):
        assert read_json(tmp_path / "missing.json") is None

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        assert read_json(path) is None

    def test_write_creates_parents(self, tmp_path):
        path = tmp_path / "a" / "b" / "data.json"
        assert write_json(path, [1, 2]) is True
        assert read_json(path) == [1, 2]
        assert not path.with_suffix(".tmp").exists()


class TestJsonTaskStore:
    """Test the task store reading tasks.json."""

    def write_tasks(self, path, data):
        path.write_text(json.dumps(data))

    def test_implements_protocol(self, tmp_path):
        assert isinstance(JsonTaskStore(tmp_path / "tasks.json"), TaskStore)

    def test_missing_file_is_empty(self, tmp_path):
        assert JsonTaskStore(tmp_path / "tasks.json").list() == []

    def test_list_and_filter(self, tmp_path):
        path = tmp_path / "tasks.json"
        self.write_tasks(path, [
            {"id": 1, "title": "A", "status": "processing", "daemon_session": "task-daemon-1"},
            {"id": 2, "title": "B", "status": "done"},
        ])
        store = JsonTaskStore(path)
        assert [t.id for t in store.list()] == [1, 2]
        assert [t.id for t in store.list(statuses=["processing"])] == [1]
        assert store.get(1).daemon_session == "task-daemon-1"
        assert store.get(99) is None

    def test_accepts_wrapped_document(self, tmp_path):
        path = tmp_path / "tasks.json"
        self.write_tasks(path, {"tasks": [{"id": 3, "title": "C", "status": "queued"}]})
        assert [t.id for t in JsonTaskStore(path).list()] == [3]

    def test_skips_malformed_entries(self, tmp_path):
        path = tmp_path / "tasks.json"
        self.write_tasks(path, [{"title": "no id"}, "junk", {"id": "x"}, {"id": 4, "status": "queued"}])
        assert [t.id for t in JsonTaskStore(path).list()] == [4]

    def test_default_path_follows_state_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TASKGRID_STATE_DIR", str(tmp_path))
        assert JsonTaskStore().path == tmp_path / "tasks.json"


class TestJsonPaneStore:
    """Test the durable pane store."""

    def test_implements_protocol(self, tmp_path):
        assert isinstance(JsonPaneStore(tmp_path / "panes.json"), PaneStore)

    def test_create_list_delete(self, tmp_path):
        store = JsonPaneStore(tmp_path / "panes.json")
        assert store.create(PaneRecord(1, "%5", PaneRole.EXTRA_SHELL, "Shell")) is True
        assert store.create(PaneRecord(1, "%6", PaneRole.EXTRA_AGENT, "Claude")) is True
        assert store.create(PaneRecord(2, "%7", PaneRole.EXTRA_SHELL, "Shell")) is True

        assert [r.pane_id for r in store.list(1)] == ["%5", "%6"]
        assert store.delete(1, "%5") is True
        assert store.delete(1, "%5") is False
        assert [r.pane_id for r in store.list(1)] == ["%6"]
        assert [r.pane_id for r in store.list(2)] == ["%7"]

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "panes.json"
        JsonPaneStore(path).create(PaneRecord(1, "%5", PaneRole.EXTRA_SHELL, "Shell"))
        records = JsonPaneStore(path).list(1)
        assert records[0].role is PaneRole.EXTRA_SHELL
        assert records[0].title == "Shell"

    def test_ignores_corrupt_rows(self, tmp_path):
        path = tmp_path / "panes.json"
        path.write_text(json.dumps([{"task_id": 1}, "junk", {"task_id": 1, "pane_id": "%2", "pane_type": "shell-extra"}]))
        assert [r.pane_id for r in JsonPaneStore(path).list(1)] == ["%2"]
