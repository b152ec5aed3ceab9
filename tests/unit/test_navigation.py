"""
Unit tests for grid cursor movement and focus forwarding.
"""

from taskgrid.gateway import TmuxGateway
from taskgrid.models import PaneHandle, PaneRole
from taskgrid.navigation import SelectionNavigator
from taskgrid.registry import PaneRegistry


def grid_navigator(transport, count, cols):
    """Navigator over ``count`` live panes, one per slot."""
    registry = PaneRegistry()
    for slot in range(count):
        pane_id = transport.add_session(f"s{slot}")
        registry.put(slot, PaneHandle(pane_id, PaneRole.GRID_MEMBER, slot + 1))
    navigator = SelectionNavigator(registry, TmuxGateway(transport))
    navigator.resize(count, cols)
    return navigator


class TestBounds:
    """Moves never leave the grid and never wrap."""

    def test_starts_on_first_slot(self, transport):
        assert grid_navigator(transport, 4, 2).cursor == 0

    def test_empty_grid_has_no_cursor(self, transport):
        navigator = grid_navigator(transport, 0, 0)
        assert navigator.cursor is None
        assert navigator.move_right() is False
        assert navigator.move_down() is False

    def test_left_at_first_slot_is_noop(self, transport):
        navigator = grid_navigator(transport, 4, 2)
        assert navigator.move_left() is False
        assert navigator.cursor == 0

    def test_right_at_last_slot_does_not_wrap(self, transport):
        navigator = grid_navigator(transport, 3, 3)
        navigator.select_index(2)
        assert navigator.move_right() is False
        assert navigator.cursor == 2

    def test_right_crosses_row_boundary(self, transport):
        """Left/right walk the row-major order, not the visual row."""
        navigator = grid_navigator(transport, 4, 2)
        navigator.select_index(1)
        assert navigator.move_right() is True
        assert navigator.cursor == 2

    def test_up_down_move_by_columns(self, transport):
        navigator = grid_navigator(transport, 6, 3)
        assert navigator.move_down() is True
        assert navigator.cursor == 3
        assert navigator.move_down() is False
        assert navigator.move_up() is True
        assert navigator.cursor == 0
        assert navigator.move_up() is False

    def test_down_into_short_last_row(self, transport):
        """5 tasks in 3x2: slot 2 has nothing below it."""
        navigator = grid_navigator(transport, 5, 3)
        navigator.select_index(2)
        assert navigator.move_down() is False
        assert navigator.cursor == 2

    def test_select_number(self, transport):
        navigator = grid_navigator(transport, 4, 2)
        assert navigator.select_number(3) is True
        assert navigator.cursor == 2
        assert navigator.select_number(5) is False
        assert navigator.select_number(0) is False
        assert navigator.cursor == 2


class TestResize:
    """Cursor clamping when the grid changes size."""

    def test_cursor_clamped_on_shrink(self, transport):
        navigator = grid_navigator(transport, 4, 2)
        navigator.select_index(3)
        navigator.resize(2, 2)
        assert navigator.cursor == 1

    def test_cursor_cleared_when_empty(self, transport):
        navigator = grid_navigator(transport, 2, 2)
        navigator.resize(0, 0)
        assert navigator.cursor is None

    def test_cursor_kept_on_grow(self, transport):
        navigator = grid_navigator(transport, 2, 2)
        navigator.select_index(1)
        navigator.resize(5, 3)
        assert navigator.cursor == 1


class TestFocusForwarding:
    """Successful moves select the new slot's pane in tmux."""

    def test_move_selects_pane(self, transport):
        navigator = grid_navigator(transport, 2, 2)
        navigator.move_right()
        assert transport.commands("select-pane")[-1] == ["select-pane", "-t", navigator.selected_pane_id()]
        assert transport.active_pane == navigator.selected_pane_id()

    def test_failed_move_sends_nothing(self, transport):
        navigator = grid_navigator(transport, 2, 2)
        navigator.move_left()
        assert transport.commands("select-pane") == []

    def test_focus_failure_does_not_block_cursor(self, transport):
        navigator = grid_navigator(transport, 3, 3)
        transport.fail_on(lambda argv: argv[0] == "select-pane")
        assert navigator.move_right() is True
        assert navigator.cursor == 1

    def test_focus_timeout_does_not_block_cursor(self, transport):
        navigator = grid_navigator(transport, 3, 3)
        transport.timeout_on(lambda argv: argv[0] == "select-pane")
        assert navigator.move_right() is True
        assert navigator.cursor == 1

    def test_empty_slot_moves_without_focus(self, transport):
        navigator = grid_navigator(transport, 2, 2)
        navigator.registry.clear_grid()
        assert navigator.move_right() is True
        assert navigator.selected_pane_id() is None
        assert transport.commands("select-pane") == []

    def test_no_gateway(self):
        navigator = SelectionNavigator(PaneRegistry())
        navigator.resize(3, 3)
        assert navigator.move_right() is True

    def test_focus_orchestrator(self, transport, orchestrator):
        navigator = grid_navigator(transport, 2, 2)
        navigator.move_right()
        navigator.orchestrator_pane_id = orchestrator
        navigator.focus_orchestrator()
        assert transport.active_pane == orchestrator

    def test_focus_orchestrator_unknown_is_noop(self, transport):
        navigator = grid_navigator(transport, 2, 2)
        navigator.focus_orchestrator()
        assert transport.commands("select-pane") == []
