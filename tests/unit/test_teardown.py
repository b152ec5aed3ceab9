"""
Unit tests for returning grid panes to their daemon sessions.
"""

import pytest

from taskgrid.acquisition import PaneAcquisitionService
from taskgrid.exceptions import PaneSetupError
from taskgrid.layout import plan_grid
from taskgrid.models import PaneHandle, PaneRole
from taskgrid.registry import PaneRegistry
from taskgrid.teardown import TeardownCoordinator


@pytest.fixture
def tiled(gateway, transport, orchestrator, make_tasks):
    """Three tasks joined into the orchestrator window."""
    tasks = make_tasks(3)
    result = PaneAcquisitionService(gateway).acquire(tasks, plan_grid(3))
    registry = PaneRegistry()
    registry.replace(result.handles)
    transport.calls.clear()
    return registry


class TestTeardown:
    """Test TeardownCoordinator.teardown()."""

    def test_breaks_each_pane_to_its_origin(self, gateway, transport, orchestrator, tiled):
        handles = [h for _, h in tiled.slots()]

        report = TeardownCoordinator(gateway).teardown(tiled)

        assert report.broken == [h.pane_id for h in handles]
        assert transport.commands("break-pane") == [
            ["break-pane", "-d", "-s", h.pane_id, "-t", f"{h.origin_session}:"] for h in handles
        ]
        for handle in handles:
            assert transport.session_of(handle.pane_id) == handle.origin_session
        assert transport.window_of(orchestrator).panes == [orchestrator]

    def test_registry_grid_cleared(self, gateway, tiled):
        TeardownCoordinator(gateway).teardown(tiled)
        assert tiled.slots() == []

    def test_restores_orchestrator_and_borders(self, gateway, transport, orchestrator, tiled):
        TeardownCoordinator(gateway).teardown(tiled)
        assert transport.panes[orchestrator].height == 100
        assert transport.options[("task-ui", "pane-border-status")] == "off"

    def test_skips_dead_panes(self, gateway, transport, tiled):
        dead = tiled.get(1).pane_id
        transport.kill_pane(dead)

        report = TeardownCoordinator(gateway).teardown(tiled)

        assert dead in report.skipped
        assert len(report.broken) == 2
        assert all(dead not in c for c in transport.commands("break-pane"))

    def test_never_breaks_orchestrator(self, gateway, transport, orchestrator):
        registry = PaneRegistry()
        registry.put(0, PaneHandle(orchestrator, PaneRole.GRID_MEMBER, 1, origin_session="task-ui"))
        report = TeardownCoordinator(gateway).teardown(registry)
        assert report.skipped == [orchestrator]
        assert transport.commands("break-pane") == []

    def test_break_failure_is_recorded_and_continues(self, gateway, transport, tiled):
        first = tiled.get(0).pane_id
        transport.fail_on(lambda argv: argv[0] == "break-pane" and first in argv)

        report = TeardownCoordinator(gateway).teardown(tiled)

        assert report.failed == [first]
        assert len(report.broken) == 2
        assert tiled.slots() == []

    def test_origin_session_gone(self, gateway, transport, tiled):
        """tmux refuses to break into a session that no longer exists."""
        handle = tiled.get(2)
        del transport.sessions[handle.origin_session]
        report = TeardownCoordinator(gateway).teardown(tiled)
        assert report.failed == [handle.pane_id]

    def test_stray_panes_returned_too(self, gateway, transport, tiled):
        stray = tiled.get(2)
        leftover = PaneHandle("%404", PaneRole.GRID_MEMBER, 9, origin_session="task-daemon-9")

        report = TeardownCoordinator(gateway).teardown(PaneRegistry(), stray=[stray, leftover])

        assert report.broken == [stray.pane_id]
        assert report.skipped == ["%404"]

    def test_orchestrator_unknown_changes_nothing(self, gateway, transport, tiled):
        transport.active_pane = None
        before = list(tiled.slots())

        with pytest.raises(PaneSetupError):
            TeardownCoordinator(gateway).teardown(tiled)

        assert tiled.slots() == before
        assert transport.commands("break-pane") == []
        assert transport.commands("resize-pane") == []

    def test_second_teardown_is_harmless(self, gateway, transport, tiled):
        coordinator = TeardownCoordinator(gateway)
        coordinator.teardown(tiled)
        report = coordinator.teardown(tiled)
        assert report.broken == []
        assert len(transport.commands("break-pane")) == 3
