"""
Unit test configuration for taskgrid.

Every test gets its own state/config directories, and the mock tmux
fixtures shared by the pane service tests live here.
"""

import logging

import pytest

from taskgrid import config
from taskgrid.gateway import TmuxGateway
from taskgrid.mocks import MockPaneStore, MockTransport
from taskgrid.models import TaskRef


@pytest.fixture(autouse=True)
def isolated_state_dir(tmp_path, monkeypatch):
    """Keep tests away from the user's ~/.taskgrid and their tmux pane."""
    base = tmp_path / "taskgrid-home"
    monkeypatch.setenv("TASKGRID_DIR", str(base))
    monkeypatch.setenv("TASKGRID_STATE_DIR", str(tmp_path / "taskgrid-state"))
    monkeypatch.delenv("TASKGRID_TMUX_SOCKET", raising=False)
    monkeypatch.delenv("TMUX_PANE", raising=False)
    monkeypatch.setattr(config, "CONFIG_PATH", base / "config.yaml")
    yield


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any setup_logging() call made by the test."""
    yield
    logger = logging.getLogger("taskgrid")
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
    logger.propagate = True


def build_tasks(transport: MockTransport, count: int, first_id: int = 1, status: str = "processing"):
    """One daemon session + window per task, like the task runner creates."""
    tasks = []
    for task_id in range(first_id, first_id + count):
        session = f"task-daemon-{task_id}"
        window_id, _ = transport.add_window(session)
        tasks.append(TaskRef(
            id=task_id,
            title=f"Task {task_id}",
            status=status,
            daemon_session=session,
            window_id=window_id,
            worktree_path=f"/work/task-{task_id}",
            port=3000 + task_id,
        ))
    return tasks


@pytest.fixture
def transport():
    return MockTransport()


@pytest.fixture
def orchestrator(transport):
    """Pane running the TUI, in the task-ui session, focused."""
    pane_id = transport.add_session("task-ui")
    transport.active_pane = pane_id
    return pane_id


@pytest.fixture
def gateway(transport):
    return TmuxGateway(transport)


@pytest.fixture
def pane_store():
    return MockPaneStore()


@pytest.fixture
def make_tasks(transport):
    """Factory: make_tasks(count, first_id=1, status="processing") -> List[TaskRef]."""

    def factory(count: int, first_id: int = 1, status: str = "processing"):
        return build_tasks(transport, count, first_id=first_id, status=status)

    return factory
