"""
Cursor movement over the tiled grid.

Moves that would leave the grid are no-ops (no wrapping). Every successful
move forwards tmux focus to the pane in the new slot; forwarding is best
effort and never blocks the cursor from advancing.
"""

from typing import Optional

from .exceptions import TmuxCommandError
from .gateway import TmuxGateway
from .logging_config import get_logger
from .registry import PaneRegistry

logger = get_logger("navigation")


class SelectionNavigator:
    """Single-cursor state machine over ``count`` slots laid out in ``cols`` columns."""

    def __init__(self, registry: PaneRegistry, gateway: Optional[TmuxGateway] = None):
        self.registry = registry
        self.gateway = gateway
        self.count = 0
        self.cols = 0
        self.cursor: Optional[int] = None
        self.orchestrator_pane_id: Optional[str] = None

    def resize(self, count: int, cols: int) -> None:
        """Adopt a new grid size, clamping the cursor into range."""
        self.count = max(count, 0)
        self.cols = max(cols, 0)
        if self.count == 0:
            self.cursor = None
        elif self.cursor is None:
            self.cursor = 0
        else:
            self.cursor = min(max(self.cursor, 0), self.count - 1)

    def move_left(self) -> bool:
        return self._move_by(-1)

    def move_right(self) -> bool:
        return self._move_by(1)

    def move_up(self) -> bool:
        return self._move_by(-self.cols) if self.cols else False

    def move_down(self) -> bool:
        return self._move_by(self.cols) if self.cols else False

    def select_number(self, number: int) -> bool:
        """Select by 1-based shortcut number."""
        return self.select_index(number - 1)

    def select_index(self, index: int) -> bool:
        if not 0 <= index < self.count:
            return False
        self.cursor = index
        self.focus_selected()
        return True

    def _move_by(self, delta: int) -> bool:
        if self.cursor is None:
            return False
        return self.select_index(self.cursor + delta)

    def selected_pane_id(self) -> Optional[str]:
        if self.cursor is None:
            return None
        handle = self.registry.get(self.cursor)
        return handle.pane_id if handle else None

    def focus_selected(self) -> None:
        """Forward tmux focus to the selected slot's pane, if it has one."""
        pane_id = self.selected_pane_id()
        if pane_id:
            self.focus_pane(pane_id)

    def focus_pane(self, pane_id: str) -> None:
        if self.gateway is None:
            return
        try:
            self.gateway.select_pane(pane_id, timeout=self.gateway.timeouts.focus)
        except TmuxCommandError as e:
            logger.debug(f"Focus forwarding to {pane_id} failed: {e}")

    def focus_orchestrator(self) -> None:
        """Hand tmux focus back to the pane running the TUI."""
        if self.orchestrator_pane_id:
            self.focus_pane(self.orchestrator_pane_id)
