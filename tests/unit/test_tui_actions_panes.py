"""
Unit tests for TUI pane actions.

The app is a MagicMock; only the mixin logic is exercised.
"""

from unittest.mock import MagicMock

from taskgrid.exceptions import ExtraPaneError
from taskgrid.models import PaneHandle, PaneRole, TaskRef
from taskgrid.tui_actions.panes import PaneActionsMixin


def tui_with_selection(task=None, pane_id="%2"):
    mock_tui = MagicMock()
    mock_tui.model.selected_task.return_value = task or TaskRef(7, "Task", "processing")
    mock_tui.model.selected_index = 0
    mock_tui.model.pane_id.return_value = pane_id
    mock_tui.shell_pane_width = "40%"
    mock_tui._selected_grid_pane = lambda: PaneActionsMixin._selected_grid_pane(mock_tui)
    return mock_tui


class TestSelectedGridPane:
    """Test _selected_grid_pane."""

    def test_without_tmux(self):
        mock_tui = MagicMock()
        mock_tui.extra_panes = None

        assert PaneActionsMixin._selected_grid_pane(mock_tui) == (None, None)
        mock_tui.notify.assert_called_once_with("tmux is not available", severity="warning")

    def test_no_selection(self):
        mock_tui = tui_with_selection()
        mock_tui.model.selected_task.return_value = None

        assert PaneActionsMixin._selected_grid_pane(mock_tui) == (None, None)
        mock_tui.notify.assert_called_once_with("No task selected", severity="warning")

    def test_task_without_pane(self):
        mock_tui = tui_with_selection(pane_id=None)

        task, pane_id = PaneActionsMixin._selected_grid_pane(mock_tui)

        assert task.id == 7
        assert pane_id is None
        assert "has no pane in the grid" in mock_tui.notify.call_args[0][0]


class TestNewShell:
    """Test action_new_shell."""

    def test_creates_with_configured_width(self):
        mock_tui = tui_with_selection()
        mock_tui.extra_panes.create_shell_pane.return_value = PaneHandle("%9", PaneRole.EXTRA_SHELL, 7)

        PaneActionsMixin.action_new_shell(mock_tui)

        task = mock_tui.model.selected_task.return_value
        mock_tui.extra_panes.create_shell_pane.assert_called_once_with(task, "%2", "40%")
        mock_tui.notify.assert_called_once_with("Opened shell %9 for #7")

    def test_failure_notifies_error(self):
        mock_tui = tui_with_selection()
        mock_tui.extra_panes.create_shell_pane.side_effect = ExtraPaneError("split failed")

        PaneActionsMixin.action_new_shell(mock_tui)

        mock_tui.notify.assert_called_once_with("split failed", severity="error")

    def test_no_pane_does_nothing(self):
        mock_tui = tui_with_selection(pane_id=None)
        PaneActionsMixin.action_new_shell(mock_tui)
        mock_tui.extra_panes.create_shell_pane.assert_not_called()


class TestNewAgentPane:
    """Test action_new_agent_pane."""

    def test_creates_agent_pane(self):
        mock_tui = tui_with_selection()
        mock_tui.extra_panes.create_agent_pane.return_value = PaneHandle("%10", PaneRole.EXTRA_AGENT, 7)

        PaneActionsMixin.action_new_agent_pane(mock_tui)

        mock_tui.notify.assert_called_once_with("Opened agent pane %10 for #7")

    def test_failure_notifies_error(self):
        mock_tui = tui_with_selection()
        mock_tui.extra_panes.create_agent_pane.side_effect = ExtraPaneError("no agent pane")

        PaneActionsMixin.action_new_agent_pane(mock_tui)

        mock_tui.notify.assert_called_once_with("no agent pane", severity="error")


class TestBreakExtras:
    """Test action_break_extras."""

    def test_breaks_selected_task(self):
        mock_tui = tui_with_selection()
        mock_tui.extra_panes.break_extra_panes.return_value = ["%9", "%10"]

        PaneActionsMixin.action_break_extras(mock_tui)

        mock_tui.extra_panes.break_extra_panes.assert_called_once_with(7)
        mock_tui.notify.assert_called_once_with("Closed 2 extra pane(s) for #7")

    def test_without_tmux(self):
        mock_tui = MagicMock()
        mock_tui.extra_panes = None
        PaneActionsMixin.action_break_extras(mock_tui)
        mock_tui.notify.assert_not_called()


class TestRebuildAndExit:
    """Test grid rebuild and exit."""

    def test_rebuild_cleans_up_then_sets_up(self):
        mock_tui = MagicMock()
        mock_tui.model.setup_in_flight = False

        PaneActionsMixin.action_rebuild_grid(mock_tui)

        assert [c[0] for c in mock_tui.method_calls if c[0] in ("cleanup_panes", "start_setup")] == [
            "cleanup_panes", "start_setup",
        ]

    def test_rebuild_refused_while_setup_runs(self):
        mock_tui = MagicMock()
        mock_tui.model.setup_in_flight = True

        PaneActionsMixin.action_rebuild_grid(mock_tui)

        mock_tui.cleanup_panes.assert_not_called()
        mock_tui.start_setup.assert_not_called()

    def test_exit_cleans_up(self):
        mock_tui = MagicMock()
        mock_tui.model.setup_in_flight = False

        PaneActionsMixin.action_exit_tiled(mock_tui)

        mock_tui.cleanup_panes.assert_called_once()
        mock_tui.exit.assert_called_once()

    def test_exit_deferred_while_setup_runs(self):
        mock_tui = MagicMock()
        mock_tui.model.setup_in_flight = True
        mock_tui._exit_pending = False

        PaneActionsMixin.action_exit_tiled(mock_tui)

        assert mock_tui._exit_pending is True
        mock_tui.exit.assert_not_called()
        mock_tui.cleanup_panes.assert_not_called()

    def test_refresh_tasks(self):
        mock_tui = MagicMock()
        PaneActionsMixin.action_refresh_tasks(mock_tui)
        mock_tui.refresh_tasks.assert_called_once()
