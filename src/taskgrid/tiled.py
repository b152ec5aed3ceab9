"""
State for the tiled view, kept free of Textual so it can be unit tested.

The Textual app owns one TiledModel and is the only writer: slow tmux work
(setup, teardown) happens in worker threads that return plain results, and
those results are applied here on the UI thread.

A setup worker parks its outcome on the model before handing it to the UI
thread, so a teardown that runs first still knows which panes it joined.
"""

import threading
import time
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .acquisition import AcquisitionResult, PaneAcquisitionService
from .exceptions import PaneSetupError, TmuxCommandError
from .gateway import TmuxGateway
from .layout import pane_title, plan_grid, slot_for_index
from .logging_config import get_logger
from .models import GridLayout, GridSlot, PaneHandle, TaskRef
from .navigation import SelectionNavigator
from .registry import PaneRegistry
from .settings import SPINNER_FRAMES, SPINNER_TICK_SECONDS
from .teardown import TeardownCoordinator, TeardownReport

logger = get_logger("tiled")


def active_tasks(tasks: Iterable[TaskRef]) -> List[TaskRef]:
    """Queued/processing tasks sorted by id (stable grid order)."""
    return sorted((t for t in tasks if t.is_active), key=lambda t: t.id)


@dataclass
class SetupOutcome:
    """What a setup worker hands back to the UI thread."""

    generation: int
    result: Optional[AcquisitionResult] = None
    error: Optional[str] = None


class TiledModel:
    """Active tasks, their grid layout, pane registry and selection."""

    def __init__(
        self,
        tasks: Iterable[TaskRef],
        gateway: Optional[TmuxGateway] = None,
        acquisition: Optional[PaneAcquisitionService] = None,
        teardown: Optional[TeardownCoordinator] = None,
    ):
        self.gateway = gateway
        self.acquisition = acquisition
        self.teardown_coordinator = teardown
        self.registry = PaneRegistry()
        self.navigator = SelectionNavigator(self.registry, gateway)
        self.tasks: List[TaskRef] = []
        self.layout = GridLayout(0, 0)
        self.generation = 0
        self.loading = False
        self.loading_started = 0.0
        # True from begin_setup until that pass's outcome is applied or claimed
        self.setup_in_flight = False
        self.panes_setup = False
        self.orchestrator_pane_id: Optional[str] = None
        self.error: Optional[str] = None
        # Grid panes whose task dropped out of the active list since setup
        self.stray: List[PaneHandle] = []
        self._latest_setup = 0
        self._unapplied: List[SetupOutcome] = []
        self._unapplied_lock = threading.Lock()
        self._setup_idle = threading.Event()
        self._setup_idle.set()
        self._set_tasks(active_tasks(tasks))

    # -- task list -----------------------------------------------------------

    def _set_tasks(self, tasks: List[TaskRef]) -> None:
        self.tasks = tasks
        self.layout = plan_grid(len(tasks))
        self.navigator.resize(len(tasks), self.layout.cols)

    def refresh_tasks(self, tasks: Iterable[TaskRef]) -> bool:
        """Adopt a new task list, re-indexing existing panes by task id.

        Returns True if the set or order of active tasks changed. A setup
        pass still in flight is not invalidated: its result is re-indexed
        against the new list when it lands.
        """
        fresh = active_tasks(tasks)
        changed = [t.id for t in fresh] != [t.id for t in self.tasks]
        old_titles = {t.id: pane_title(t) for t in self.tasks}

        by_task = self.known_handles()
        self._set_tasks(fresh)
        if changed:
            self._adopt(by_task)
        self._retitle(old_titles)
        return changed

    def _adopt(self, by_task: Dict[int, PaneHandle]) -> None:
        """Index handles by the current task order; departed tasks' panes go stray."""
        wanted = {t.id for t in self.tasks}
        tracked = {h.pane_id for h in self.stray}
        for task_id, handle in by_task.items():
            if task_id not in wanted and handle.pane_id not in tracked:
                self.stray.append(handle)
        self.registry.replace([by_task.get(t.id) for t in self.tasks])

    def _retitle(self, old_titles: Dict[int, str]) -> None:
        """Retitle grid panes of tasks renamed since the last refresh."""
        if self.setup_in_flight:
            # The running pass titles panes itself; tmux work stays sequential
            return
        for index, task in enumerate(self.tasks):
            old = old_titles.get(task.id)
            if old is not None and old != pane_title(task):
                self.update_pane_title(index, pane_title(task))

    # -- setup ---------------------------------------------------------------

    def begin_setup(self) -> int:
        """Mark setup as in flight and return its generation token."""
        self.generation += 1
        self._latest_setup = self.generation
        self.loading = bool(self.tasks)
        self.setup_in_flight = bool(self.tasks)
        self.loading_started = time.monotonic()
        self.error = None
        if self.setup_in_flight:
            self._setup_idle.clear()
        return self.generation

    def known_handles(self) -> Dict[int, PaneHandle]:
        return {h.task_id: h for _, h in self.registry.slots()}

    def run_setup(self, generation: int) -> SetupOutcome:
        """Blocking tmux work; safe to call from a worker thread.

        Reads a snapshot of the model and only touches it to park the
        outcome for apply_setup or cleanup, whichever comes first.
        """
        try:
            outcome = self._acquire(generation)
            with self._unapplied_lock:
                self._unapplied.append(outcome)
            return outcome
        finally:
            self._setup_idle.set()

    def _acquire(self, generation: int) -> SetupOutcome:
        if self.acquisition is None or not self.tasks:
            return SetupOutcome(generation)
        tasks, layout, known = list(self.tasks), self.layout, self.known_handles()
        try:
            return SetupOutcome(generation, result=self.acquisition.acquire(tasks, layout, known))
        except PaneSetupError as e:
            return SetupOutcome(generation, error=str(e))

    def wait_for_setup(self, timeout: Optional[float] = None) -> bool:
        """Block until no setup worker is joining panes. False on timeout."""
        return self._setup_idle.wait(timeout)

    def has_unapplied_setup(self) -> bool:
        with self._unapplied_lock:
            return bool(self._unapplied)

    def apply_setup(self, outcome: SetupOutcome) -> bool:
        """Apply a setup result on the UI thread.

        Returns False if the outcome was superseded by a newer setup pass or
        a teardown, or was already claimed by cleanup().
        """
        if not self._claim(outcome):
            return False
        if outcome.generation != self.generation:
            logger.debug(f"Discarding stale setup result (gen {outcome.generation} != {self.generation})")
            self._track_stale(outcome)
            return False
        if outcome.error:
            self.error = outcome.error
            return True
        if outcome.result is not None:
            self.orchestrator_pane_id = outcome.result.orchestrator_pane_id
            self.navigator.orchestrator_pane_id = self.orchestrator_pane_id
            # The task list may have been refreshed while the pass ran
            self._adopt({h.task_id: h for h in outcome.result.handles if h is not None})
            self.panes_setup = True
        return True

    def _claim(self, outcome: SetupOutcome) -> bool:
        with self._unapplied_lock:
            for i, pending in enumerate(self._unapplied):
                if pending is outcome:
                    del self._unapplied[i]
                    break
            else:
                return False
        self._settle(outcome)
        return True

    def _settle(self, outcome: SetupOutcome) -> None:
        if outcome.generation == self._latest_setup:
            self.setup_in_flight = False
            self.loading = False

    def _track_stale(self, outcome: SetupOutcome) -> None:
        """Panes joined by a superseded pass still have to be returned on teardown."""
        if outcome.result is None:
            return
        tracked = set(self.registry.pane_ids()) | {h.pane_id for h in self.stray}
        self.stray.extend(h for h in outcome.result.handles if h is not None and h.pane_id not in tracked)

    def _claim_all(self) -> None:
        with self._unapplied_lock:
            pending, self._unapplied = self._unapplied, []
        for outcome in pending:
            self._settle(outcome)
            self._track_stale(outcome)

    # -- teardown ------------------------------------------------------------

    def cleanup(self) -> Optional[TeardownReport]:
        """Return all grid panes to their sessions. Never raises.

        Finished setup passes not yet applied are folded in as strays. A
        pass still running is not waited for; see wait_for_setup().
        """
        self.generation += 1
        self._claim_all()
        if self.teardown_coordinator is None:
            self.registry.clear_grid()
            self.stray.clear()
            return None
        try:
            report = self.teardown_coordinator.teardown(self.registry, self.stray)
        except PaneSetupError as e:
            logger.error(f"Teardown skipped: {e}")
            return None
        self.stray.clear()
        self.panes_setup = False
        return report

    # -- selection -----------------------------------------------------------

    @property
    def selected_index(self) -> Optional[int]:
        return self.navigator.cursor

    def selected_task(self) -> Optional[TaskRef]:
        idx = self.navigator.cursor
        if idx is not None and 0 <= idx < len(self.tasks):
            return self.tasks[idx]
        return None

    def move(self, direction: str) -> bool:
        moves = {
            "left": self.navigator.move_left,
            "right": self.navigator.move_right,
            "up": self.navigator.move_up,
            "down": self.navigator.move_down,
        }
        return moves[direction]()

    def select_number(self, number: int) -> bool:
        return self.navigator.select_number(number)

    def focus_orchestrator(self) -> None:
        self.navigator.focus_orchestrator()

    # -- display helpers -----------------------------------------------------

    def pane_id(self, index: int) -> Optional[str]:
        handle = self.registry.get(index)
        return handle.pane_id if handle else None

    def grid_position(self, index: int) -> Optional[GridSlot]:
        if self.layout.cols <= 0:
            return None
        return slot_for_index(index, self.layout.cols)

    def is_unavailable(self, index: int) -> bool:
        """A slot whose pane could not be acquired."""
        return self.panes_setup and self.registry.get(index) is None

    def spinner_frame(self, now: Optional[float] = None) -> str:
        elapsed = (now if now is not None else time.monotonic()) - self.loading_started
        return SPINNER_FRAMES[int(elapsed / SPINNER_TICK_SECONDS) % len(SPINNER_FRAMES)]

    def update_pane_title(self, index: int, title: str) -> bool:
        pane_id = self.pane_id(index)
        if not pane_id or self.gateway is None:
            return False
        try:
            self.gateway.set_pane_title(pane_id, title, timeout=self.gateway.timeouts.focus)
            return True
        except TmuxCommandError as e:
            logger.debug(f"Failed to retitle pane {pane_id}: {e}")
            return False
