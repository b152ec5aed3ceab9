"""
Extra panes attached to one task's primary agent pane.

A task's detail view can grow an extra shell (split to the side) or a
second interactive agent (split below). Each extra pane is recorded in the
durable pane store so it can be found again after a restart and broken
away on cleanup.
"""

import os
import shlex
from pathlib import Path
from typing import List, Optional

from .exceptions import ExtraPaneError, TmuxCommandError
from .gateway import TmuxGateway
from .logging_config import get_logger
from .models import PaneHandle, PaneRecord, PaneRole, SplitDirection, TaskRef
from .protocols import PaneStore
from .registry import PaneRegistry
from .settings import (
    AGENT_PANE_TITLE,
    DEFAULT_AGENT_COMMAND,
    DEFAULT_SHELL,
    DEFAULT_SHELL_PANE_WIDTH,
    SHELL_PANE_TITLE,
)

logger = get_logger("extra_panes")


def task_workdir(task: TaskRef) -> str:
    """Directory an extra pane starts in: the task worktree, else $HOME."""
    if task.worktree_path:
        return task.worktree_path
    return str(Path.home())


def shell_env_command(task: TaskRef) -> str:
    """``export`` line giving a shell the task's context."""
    return (
        f"export WORKTREE_TASK_ID={task.id} "
        f"WORKTREE_PORT={task.port} "
        f"WORKTREE_PATH={shlex.quote(task.worktree_path)}"
    )


class ExtraPaneManager:
    """Creates, enumerates and breaks away a task's extra panes."""

    def __init__(
        self,
        gateway: TmuxGateway,
        pane_store: Optional[PaneStore] = None,
        registry: Optional[PaneRegistry] = None,
        agent_command: str = DEFAULT_AGENT_COMMAND,
        shell: Optional[str] = None,
        orchestrator_pane_id: Optional[str] = None,
    ):
        self.gateway = gateway
        self.pane_store = pane_store
        self.registry = registry
        self.agent_command = agent_command
        self.shell = shell or os.environ.get("SHELL") or DEFAULT_SHELL
        self.orchestrator_pane_id = orchestrator_pane_id

    def agent_startup_command(self, task: TaskRef) -> str:
        """Same command the task's primary agent pane was started with."""
        return f"cd {shlex.quote(task_workdir(task))} && {self.agent_command}"

    # -- creation ------------------------------------------------------------

    def create_shell_pane(self, task: TaskRef, agent_pane_id: str, width: Optional[str] = None) -> PaneHandle:
        return self._create(task, agent_pane_id, PaneRole.EXTRA_SHELL, width or DEFAULT_SHELL_PANE_WIDTH)

    def create_agent_pane(self, task: TaskRef, agent_pane_id: str) -> PaneHandle:
        return self._create(task, agent_pane_id, PaneRole.EXTRA_AGENT, None)

    def _create(self, task: TaskRef, agent_pane_id: str, role: PaneRole, width: Optional[str]) -> PaneHandle:
        if not agent_pane_id:
            raise ExtraPaneError(f"Task #{task.id} has no agent pane to split from")

        workdir = task_workdir(task)
        if role is PaneRole.EXTRA_SHELL:
            direction, command, title = SplitDirection.HORIZONTAL, [self.shell], SHELL_PANE_TITLE
        elif role is PaneRole.EXTRA_AGENT:
            direction, command, title = SplitDirection.VERTICAL, None, AGENT_PANE_TITLE
        else:
            raise ValueError(f"Not an extra pane role: {role!r}")

        logger.info(f"Creating {role.value} pane for task {task.id}, workdir={workdir!r}")
        try:
            pane_id = self.gateway.split_window(
                agent_pane_id, direction, size=width, cwd=workdir, command=command
            )
        except TmuxCommandError as e:
            logger.error(f"split-window failed for task {task.id}: {e}")
            raise ExtraPaneError(f"Failed to create {title.lower()} pane: {e}") from e

        self._quietly(lambda: self.gateway.set_pane_title(pane_id, title))
        if role is PaneRole.EXTRA_SHELL:
            self._quietly(lambda: self.gateway.send_keys(pane_id, shell_env_command(task)))
            self._quietly(lambda: self.gateway.send_keys(pane_id, "clear"))
        else:
            self._quietly(lambda: self.gateway.send_keys(pane_id, self.agent_startup_command(task)))

        handle = PaneHandle(pane_id=pane_id, role=role, task_id=task.id, title=title)
        self._persist(handle)
        if self.registry is not None:
            self.registry.add_extra(handle)

        if self.orchestrator_pane_id:
            self._quietly(lambda: self.gateway.select_pane(self.orchestrator_pane_id))

        logger.info(f"Created pane {pane_id} for task {task.id}")
        return handle

    def _persist(self, handle: PaneHandle) -> None:
        if self.pane_store is None:
            return
        record = PaneRecord(task_id=handle.task_id, pane_id=handle.pane_id, role=handle.role, title=handle.title)
        if self.pane_store.create(record):
            logger.info(f"Saved pane {handle.pane_id} for task {handle.task_id}")
        else:
            logger.error(f"Failed to save pane {handle.pane_id} for task {handle.task_id}")

    # -- enumeration ---------------------------------------------------------

    def stored_extra_panes(self, task_id: int) -> List[PaneHandle]:
        if self.pane_store is None:
            return []
        return [r.to_handle() for r in self.pane_store.list(task_id) if r.role.is_extra]

    def get_all_task_panes(
        self,
        task_id: int,
        agent_pane_id: Optional[str] = None,
        shell_pane_id: Optional[str] = None,
    ) -> List[PaneHandle]:
        """Primary panes first, then every stored extra pane."""
        panes = []
        if agent_pane_id:
            panes.append(PaneHandle(agent_pane_id, PaneRole.PRIMARY_AGENT, task_id, title=AGENT_PANE_TITLE))
        if shell_pane_id:
            panes.append(PaneHandle(shell_pane_id, PaneRole.PRIMARY_SHELL, task_id, title=SHELL_PANE_TITLE))
        return panes + self.stored_extra_panes(task_id)

    # -- removal -------------------------------------------------------------

    def break_extra_panes(self, task_id: int) -> List[str]:
        """Break every stored extra pane of a task; primary panes are left alone.

        Returns the ids of panes that were broken away.
        """
        return self._break_all(self.stored_extra_panes(task_id))

    def cleanup_all_panes(
        self,
        task_id: int,
        agent_pane_id: Optional[str] = None,
        shell_pane_id: Optional[str] = None,
    ) -> List[str]:
        """Break every pane of a task, primary ones included."""
        logger.info(f"Breaking all panes for task {task_id}")
        return self._break_all(self.get_all_task_panes(task_id, agent_pane_id, shell_pane_id))

    def remove_extra_pane(self, task_id: int, pane_id: str) -> bool:
        """Break one extra pane away and forget it."""
        handle = next((h for h in self.stored_extra_panes(task_id) if h.pane_id == pane_id), None)
        if handle is None:
            logger.warning(f"Pane {pane_id} is not an extra pane of task {task_id}")
            return False
        broken = bool(self._break_all([handle]))
        if self.pane_store is not None:
            self.pane_store.delete(task_id, pane_id)
        return broken

    def _break_all(self, handles: List[PaneHandle]) -> List[str]:
        broken = []
        for handle in handles:
            if not self.gateway.pane_exists(handle.pane_id):
                logger.debug(f"Pane {handle.pane_id} doesn't exist, skipping")
                self._forget(handle)
                continue
            try:
                self.gateway.break_pane(handle.pane_id, detached=True)
            except TmuxCommandError as e:
                logger.error(f"Failed to break pane {handle.pane_id}: {e}")
                continue
            logger.debug(f"Broke pane {handle.pane_id}")
            broken.append(handle.pane_id)
            self._forget(handle)
        return broken

    def _forget(self, handle: PaneHandle) -> None:
        if self.registry is not None:
            self.registry.remove(handle)

    @staticmethod
    def _quietly(action) -> None:
        try:
            action()
        except TmuxCommandError as e:
            logger.debug(f"Ignoring tmux failure: {e}")
