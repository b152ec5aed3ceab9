"""
Pane acquisition: pull each active task's agent pane into the grid.

The orchestrator pane is shrunk to a strip at the top, the first task's pane
is joined below it, and every further pane is joined by splitting an
already-placed neighbour (see layout.plan_split). tmux commands against a
shared session are not safe to parallelize, so slots are processed strictly
in order.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .exceptions import PaneSetupError, TmuxCommandError
from .gateway import TmuxGateway
from .layout import pane_title, plan_split
from .logging_config import get_logger, get_structured_logger
from .models import GridLayout, PaneHandle, PaneRole, SplitDirection, TaskRef
from .settings import DEFAULT_UI_SESSION, GRID_SHARE, RESERVED_STRIP

logger = get_logger("acquisition")


@dataclass
class AcquisitionResult:
    """Outcome of one setup pass; handles[i] is None when slot i failed."""

    orchestrator_pane_id: str
    handles: List[Optional[PaneHandle]] = field(default_factory=list)

    @property
    def acquired_count(self) -> int:
        return sum(1 for h in self.handles if h is not None)

    @property
    def failed_slots(self) -> List[int]:
        return [i for i, h in enumerate(self.handles) if h is None]


class PaneAcquisitionService:
    """Moves task panes from their daemon windows into the orchestrator window."""

    def __init__(self, gateway: TmuxGateway, ui_session: str = DEFAULT_UI_SESSION):
        self.gateway = gateway
        self.ui_session = ui_session

    def find_task_window(self, task: TaskRef) -> Optional[str]:
        """tmux target for the window a task's agent runs in.

        The window id is preferred since it survives renames; otherwise the
        first window of the task's daemon session is used.
        """
        if task.window_id:
            try:
                if task.window_id in self.gateway.list_window_ids():
                    return task.window_id
            except TmuxCommandError as e:
                logger.debug(f"list-windows failed while locating task {task.id}: {e}")

        if task.daemon_session and self.gateway.has_session(task.daemon_session):
            return f"{task.daemon_session}:0"

        return None

    def find_source_pane(self, task: TaskRef) -> Optional[str]:
        """Id of the first pane in the task's window, or None."""
        window = self.find_task_window(task)
        if window is None:
            logger.warning(f"No window for task {task.id}")
            return None
        try:
            panes = self.gateway.list_panes(window)
        except TmuxCommandError as e:
            logger.warning(f"Failed to list panes for task {task.id}: {e}")
            return None
        return panes[0] if panes else None

    def acquire(
        self,
        tasks: Sequence[TaskRef],
        layout: GridLayout,
        known: Optional[Dict[int, PaneHandle]] = None,
    ) -> AcquisitionResult:
        """Join every task's pane into the grid.

        Args:
            tasks: active tasks in grid order
            layout: planned grid for len(tasks)
            known: handles from a previous pass; live ones are reused as-is

        Raises:
            PaneSetupError: the orchestrator's own pane can't be determined
        """
        log = get_structured_logger("acquisition").with_context(tasks=len(tasks), grid=f"{layout.cols}x{layout.rows}")
        log.info("Setting up grid")

        try:
            orchestrator = self.gateway.current_pane_id()
        except TmuxCommandError as e:
            logger.error(f"Failed to determine orchestrator pane: {e}")
            raise PaneSetupError(f"Cannot determine the orchestrator pane: {e}") from e

        known = known or {}
        deadline = time.monotonic() + self.gateway.timeouts.setup
        pane_ids: List[Optional[str]] = [None] * len(tasks)
        handles: List[Optional[PaneHandle]] = [None] * len(tasks)

        self._best_effort(lambda: self.gateway.resize_pane(orchestrator, RESERVED_STRIP), "shrink orchestrator pane")

        for index, task in enumerate(tasks):
            if time.monotonic() > deadline:
                log.warning("Setup time budget exhausted, leaving remaining slots empty", slot=index)
                break

            previous = known.get(task.id)
            if previous is not None and previous.pane_id != orchestrator and self.gateway.pane_exists(previous.pane_id):
                pane_ids[index] = previous.pane_id
                handles[index] = previous
                continue

            handle = self._acquire_slot(index, task, layout, pane_ids, orchestrator)
            if handle is not None:
                pane_ids[index] = handle.pane_id
                handles[index] = handle

        self._best_effort(lambda: self.gateway.select_pane(orchestrator), "refocus orchestrator pane")
        self._best_effort(lambda: self.gateway.set_border_titles(self.ui_session), "enable pane border titles")

        result = AcquisitionResult(orchestrator_pane_id=orchestrator, handles=handles)
        log.info("Grid setup completed", acquired=result.acquired_count)
        return result

    def _acquire_slot(
        self,
        index: int,
        task: TaskRef,
        layout: GridLayout,
        pane_ids: List[Optional[str]],
        orchestrator: str,
    ) -> Optional[PaneHandle]:
        if index == 0:
            target, direction, size = orchestrator, SplitDirection.VERTICAL, GRID_SHARE
        else:
            plan = plan_split(index, layout, pane_ids)
            if plan is None:
                logger.warning(f"No pane to split from for task {task.id} (slot {index})")
                return None
            if plan.fallback:
                logger.debug(f"Slot {index} falling back to slot 0 for task {task.id}")
            target, direction, size = plan.target_pane_id, plan.direction, None

        source = self.find_source_pane(task)
        if source is None:
            return None
        if source == orchestrator:
            logger.warning(f"Task {task.id} pane is the orchestrator pane, skipping")
            return None

        logger.debug(f"Joining task {task.id} pane {source}, split {direction.value} from {target}")
        try:
            self.gateway.join_pane(source, target, direction, size=size)
        except TmuxCommandError as e:
            logger.warning(f"Failed to join pane for task {task.id}: {e}")
            return None

        title = pane_title(task)
        self._best_effort(lambda: self.gateway.set_pane_title(source, title), f"title pane {source}")
        return PaneHandle(
            pane_id=source,
            role=PaneRole.GRID_MEMBER,
            task_id=task.id,
            origin_session=task.daemon_session,
            origin_window=task.window_id,
            title=title,
        )

    @staticmethod
    def _best_effort(action, description: str) -> None:
        try:
            action()
        except TmuxCommandError as e:
            logger.debug(f"Could not {description}: {e}")
