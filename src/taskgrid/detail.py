"""
Pane set of one task: its primary agent/shell panes plus any extra panes.
"""

from typing import List, Optional

from .acquisition import PaneAcquisitionService
from .exceptions import ExtraPaneError, TmuxCommandError
from .extra_panes import ExtraPaneManager
from .logging_config import get_logger
from .models import PaneHandle, TaskRef

logger = get_logger("detail")


class DetailPanes:
    """Locates a task's primary panes and manages the extras around them.

    The primary agent pane is the first pane of the task's window; a second
    pane that isn't a stored extra pane is taken to be the primary shell.
    """

    def __init__(self, task: TaskRef, manager: ExtraPaneManager, locator: PaneAcquisitionService):
        self.task = task
        self.manager = manager
        self.locator = locator
        self.agent_pane_id: Optional[str] = None
        self.shell_pane_id: Optional[str] = None

    def locate(self) -> bool:
        """Find the primary panes. Returns False if the task has no window."""
        self.agent_pane_id = None
        self.shell_pane_id = None
        window = self.locator.find_task_window(self.task)
        if window is None:
            logger.warning(f"No window found for task {self.task.id}")
            return False
        try:
            pane_ids = self.manager.gateway.list_panes(window)
        except TmuxCommandError as e:
            logger.warning(f"Failed to list panes of {window} for task {self.task.id}: {e}")
            return False

        extras = {h.pane_id for h in self.manager.stored_extra_panes(self.task.id)}
        primaries = [p for p in pane_ids if p not in extras]
        if primaries:
            self.agent_pane_id = primaries[0]
        if len(primaries) > 1:
            self.shell_pane_id = primaries[1]
        logger.debug(
            f"Task {self.task.id}: agent={self.agent_pane_id} shell={self.shell_pane_id} extras={len(extras)}"
        )
        return self.agent_pane_id is not None

    def panes(self) -> List[PaneHandle]:
        return self.manager.get_all_task_panes(self.task.id, self.agent_pane_id, self.shell_pane_id)

    def _require_agent_pane(self) -> str:
        if self.agent_pane_id is None and not self.locate():
            raise ExtraPaneError(f"Task #{self.task.id} has no agent pane")
        return self.agent_pane_id

    def new_shell(self, width: Optional[str] = None) -> PaneHandle:
        return self.manager.create_shell_pane(self.task, self._require_agent_pane(), width)

    def new_agent(self) -> PaneHandle:
        return self.manager.create_agent_pane(self.task, self._require_agent_pane())

    def break_extras(self) -> List[str]:
        return self.manager.break_extra_panes(self.task.id)

    def cleanup(self) -> List[str]:
        """Break every pane of the task away, primary panes included."""
        broken = self.manager.cleanup_all_panes(self.task.id, self.agent_pane_id, self.shell_pane_id)
        self.agent_pane_id = None
        self.shell_pane_id = None
        return broken

    def remove(self, pane_id: str) -> bool:
        return self.manager.remove_extra_pane(self.task.id, pane_id)
