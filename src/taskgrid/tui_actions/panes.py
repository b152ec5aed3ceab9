"""
Pane action methods for TUI.

Extra panes for the selected task, task refresh, grid rebuild and exit.
"""

from ..exceptions import ExtraPaneError


class PaneActionsMixin:
    """Mixin providing pane management actions for TiledApp."""

    def _selected_grid_pane(self):
        """(task, pane_id) for the selection, notifying when either is missing."""
        if self.extra_panes is None:
            self.notify("tmux is not available", severity="warning")
            return None, None
        task = self.model.selected_task()
        if task is None:
            self.notify("No task selected", severity="warning")
            return None, None
        pane_id = self.model.pane_id(self.model.selected_index)
        if not pane_id:
            self.notify(f"Task #{task.id} has no pane in the grid", severity="warning")
            return task, None
        return task, pane_id

    def action_new_shell(self) -> None:
        """Split a shell pane off the selected task's agent pane."""
        task, pane_id = self._selected_grid_pane()
        if not pane_id:
            return
        try:
            handle = self.extra_panes.create_shell_pane(task, pane_id, self.shell_pane_width)
        except ExtraPaneError as e:
            self.notify(str(e), severity="error")
            return
        self.notify(f"Opened shell {handle.pane_id} for #{task.id}")

    def action_new_agent_pane(self) -> None:
        """Split a second agent pane below the selected task's agent pane."""
        task, pane_id = self._selected_grid_pane()
        if not pane_id:
            return
        try:
            handle = self.extra_panes.create_agent_pane(task, pane_id)
        except ExtraPaneError as e:
            self.notify(str(e), severity="error")
            return
        self.notify(f"Opened agent pane {handle.pane_id} for #{task.id}")

    def action_break_extras(self) -> None:
        """Break away every extra pane of the selected task."""
        if self.extra_panes is None:
            return
        task = self.model.selected_task()
        if task is None:
            return
        broken = self.extra_panes.break_extra_panes(task.id)
        self.notify(f"Closed {len(broken)} extra pane(s) for #{task.id}")

    def action_refresh_tasks(self) -> None:
        self.refresh_tasks()

    def action_rebuild_grid(self) -> None:
        """Return every pane, then join the current task set afresh."""
        if self.model.setup_in_flight:
            self.notify("Pane setup already in progress", severity="warning")
            return
        self.cleanup_panes()
        self.start_setup()

    def action_exit_tiled(self) -> None:
        """Return all panes and quit; deferred while a setup pass is running."""
        if self.model.setup_in_flight:
            self._exit_pending = True
            self.notify("Waiting for pane setup to finish...")
            return
        self.cleanup_panes()
        self.exit()
