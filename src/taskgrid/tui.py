"""
Textual TUI for the tiled view.

The app runs in the orchestrator pane. On mount it pulls every active
task's agent pane into its own tmux window, keeps the task list fresh, and
on exit returns each pane to the daemon session it came from.
"""

from typing import Iterable, Optional

from textual import work
from textual.app import App, ComposeResult
from textual.css.query import NoMatches
from textual.widgets import Footer, Header, Static

from . import __version__
from .acquisition import PaneAcquisitionService
from .extra_panes import ExtraPaneManager
from .gateway import TmuxGateway
from .logging_config import get_logger, setup_tui_logging
from .models import TaskRef
from .protocols import PaneStore, TaskStore
from .settings import (
    DEFAULT_AGENT_COMMAND,
    DEFAULT_SHELL_PANE_WIDTH,
    DEFAULT_UI_SESSION,
    SPINNER_TICK_SECONDS,
    TASK_REFRESH_SECONDS,
)
from .teardown import TeardownCoordinator
from .tiled import SetupOutcome, TiledModel
from .tui_actions import GridNavigationActionsMixin, PaneActionsMixin
from .tui_widgets import GridStatusBar, TaskRows

logger = get_logger("tui")


class TiledApp(
    GridNavigationActionsMixin,
    PaneActionsMixin,
    App,
):
    """taskgrid tiled view"""

    CSS_PATH = "tui.tcss"

    BINDINGS = [
        ("escape", "exit_tiled", "Exit"),
        ("q", "exit_tiled", "Exit"),
        # Grid navigation
        ("left", "move('left')", "Left"),
        ("h", "move('left')", "Left"),
        ("right", "move('right')", "Right"),
        ("l", "move('right')", "Right"),
        ("up", "move('up')", "Up"),
        ("k", "move('up')", "Up"),
        ("down", "move('down')", "Down"),
        ("j", "move('down')", "Down"),
        # Jump to task N
        *[(str(n), f"select_number({n})", f"Task {n}") for n in range(1, 10)],
        ("o", "focus_orchestrator", "Focus TUI"),
        # Extra panes on the selected task
        ("s", "new_shell", "Shell"),
        ("c", "new_agent_pane", "Agent pane"),
        ("x", "break_extras", "Close extras"),
        ("r", "refresh_tasks", "Refresh"),
        ("R", "rebuild_grid", "Rebuild grid"),
    ]

    def __init__(
        self,
        task_store: TaskStore,
        gateway: Optional[TmuxGateway] = None,
        pane_store: Optional[PaneStore] = None,
        ui_session: str = DEFAULT_UI_SESSION,
        shell_pane_width: str = DEFAULT_SHELL_PANE_WIDTH,
        agent_command: str = DEFAULT_AGENT_COMMAND,
        refresh_interval: float = TASK_REFRESH_SECONDS,
    ):
        super().__init__()
        self.task_store = task_store
        self.gateway = gateway
        self.shell_pane_width = shell_pane_width
        self.refresh_interval = refresh_interval
        # Set when exit is requested while a setup worker is still joining panes
        self._exit_pending = False
        # Set once panes have been returned on unmount; late workers skip the UI
        self._unmounted = False

        acquisition = PaneAcquisitionService(gateway, ui_session) if gateway else None
        teardown = TeardownCoordinator(gateway, ui_session) if gateway else None
        self.model = TiledModel(task_store.list(), gateway, acquisition, teardown)
        self.extra_panes: Optional[ExtraPaneManager] = None
        if gateway is not None:
            self.extra_panes = ExtraPaneManager(
                gateway,
                pane_store=pane_store,
                registry=self.model.registry,
                agent_command=agent_command,
            )

    def compose(self) -> ComposeResult:
        """Create child widgets"""
        yield Header()
        yield GridStatusBar(self.model, id="grid-status")
        yield TaskRows(self.model, id="task-rows")
        yield Static(
            "←↓↑→/hjkl:Nav | 1-9:Jump | s:Shell | c:Agent | x:Close extras | r:Refresh | R:Rebuild | esc:Exit",
            id="help-text",
        )
        yield Footer()

    def on_mount(self) -> None:
        """Called when app starts"""
        self.title = f"taskgrid v{__version__}"
        self.sub_title = "tiled view"
        if self.model.tasks:
            self.start_setup()
        self.set_interval(SPINNER_TICK_SECONDS, self._tick_spinner)
        if self.refresh_interval > 0:
            self.set_interval(self.refresh_interval, self.refresh_tasks)

    # -- pane setup ----------------------------------------------------------

    def start_setup(self) -> None:
        """Kick off a background pass joining task panes into the grid."""
        if self.model.acquisition is None or not self.model.tasks:
            self._refresh_view()
            return
        generation = self.model.begin_setup()
        logger.info(f"Starting pane setup for {len(self.model.tasks)} tasks (gen {generation})")
        self._refresh_view()
        self._setup_panes_async(generation)

    @work(thread=True, exclusive=True, group="pane_setup")
    def _setup_panes_async(self, generation: int) -> None:
        """Join panes off the main thread, then apply to UI."""
        outcome = self.model.run_setup(generation)
        if self._unmounted:
            return
        self.call_from_thread(self._apply_setup, outcome)

    def _apply_setup(self, outcome: SetupOutcome) -> None:
        """Apply a setup result on main thread (no I/O)."""
        applied = self.model.apply_setup(outcome)
        if applied and self.extra_panes is not None:
            self.extra_panes.orchestrator_pane_id = self.model.orchestrator_pane_id
        if applied and self.model.error:
            self.notify(f"Pane setup failed: {self.model.error}", severity="error")
        if self._exit_pending and not self.model.setup_in_flight:
            self.cleanup_panes()
            self.exit()
            return
        self._refresh_view()

    # -- task refresh --------------------------------------------------------

    def refresh_tasks(self) -> None:
        """Re-read the task store (kicks off background worker)."""
        self._fetch_tasks_async()

    @work(thread=True, exclusive=True, group="refresh_tasks")
    def _fetch_tasks_async(self) -> None:
        """Read the task list off the main thread, then apply to UI."""
        tasks = self.task_store.list()
        self.call_from_thread(self._apply_tasks, tasks)

    def _apply_tasks(self, tasks: Iterable[TaskRef]) -> None:
        if self.model.refresh_tasks(tasks):
            logger.info(f"Active tasks changed, now {len(self.model.tasks)}")
        self._refresh_view()

    # -- teardown ------------------------------------------------------------

    def cleanup_panes(self) -> None:
        """Break extra panes away and return grid panes to their sessions.

        Runs on the main thread; the teardown pass has its own deadline.
        """
        self._return_panes()
        self._refresh_view()

    def _return_panes(self) -> None:
        if self.extra_panes is not None:
            task_ids = sorted({h.task_id for h in self.model.registry.handles() if h.role.is_extra})
            for task_id in task_ids:
                self.extra_panes.break_extra_panes(task_id)
        if self.model.panes_setup or self.model.stray or self.model.has_unapplied_setup():
            report = self.model.cleanup()
            if report is not None and report.failed:
                logger.warning(f"{len(report.failed)} panes could not be returned: {report.failed}")

    async def action_quit(self) -> None:
        """Route the built-in quit binding through the pane-returning exit."""
        self.action_exit_tiled()

    def on_unmount(self) -> None:
        """Return panes if the app is closed without going through exit_tiled.

        A setup worker still joining panes is waited for first, so every pane
        it joins is accounted for.
        """
        self._unmounted = True
        if self.model.setup_in_flight and self.gateway is not None:
            if not self.model.wait_for_setup(self.gateway.timeouts.setup):
                logger.warning("Pane setup still running at exit; its panes may stay in the UI window")
        if self.model.panes_setup or self.model.stray or self.model.has_unapplied_setup():
            self._return_panes()

    # -- rendering -----------------------------------------------------------

    def _tick_spinner(self) -> None:
        if not self.model.loading:
            return
        try:
            self.query_one("#grid-status", GridStatusBar).refresh()
        except NoMatches:
            pass

    def _refresh_view(self) -> None:
        for selector in ("#grid-status", "#task-rows"):
            try:
                self.query_one(selector).refresh()
            except NoMatches:
                pass


def run_tui(
    task_store: TaskStore,
    gateway: Optional[TmuxGateway] = None,
    pane_store: Optional[PaneStore] = None,
    ui_session: str = DEFAULT_UI_SESSION,
    shell_pane_width: str = DEFAULT_SHELL_PANE_WIDTH,
    agent_command: str = DEFAULT_AGENT_COMMAND,
):
    """Run the tiled view in the current terminal"""
    import os
    import sys

    # Ensure we're using a proper terminal
    if not sys.stdout.isatty():
        print("Error: Must run in a TTY terminal", file=sys.stderr)
        sys.exit(1)

    os.environ.setdefault("TERM", "xterm-256color")
    setup_tui_logging()

    app = TiledApp(
        task_store,
        gateway=gateway,
        pane_store=pane_store,
        ui_session=ui_session,
        shell_pane_width=shell_pane_width,
        agent_command=agent_command,
    )
    app.run()
