"""
Navigation action methods for TUI.

Moves the grid cursor; the model forwards tmux focus to the selected pane.
"""


class GridNavigationActionsMixin:
    """Mixin providing grid cursor actions for TiledApp."""

    def action_move(self, direction: str) -> None:
        """Move the cursor one slot left/right or one row up/down."""
        if self.model.move(direction):
            self._refresh_view()

    def action_select_number(self, number: int) -> None:
        """Jump straight to the Nth task (1-based)."""
        if self.model.select_number(number):
            self._refresh_view()

    def action_focus_orchestrator(self) -> None:
        self.model.focus_orchestrator()
