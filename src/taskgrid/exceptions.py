"""
Exception hierarchy for taskgrid.

Only precondition failures (PaneSetupError) and explicit user-facing errors
escape to callers. Per-pane failures are logged and absorbed where they occur.
"""

from typing import Optional, Sequence


class TaskgridError(Exception):
    """Base class for all taskgrid errors."""


class TmuxNotFoundError(TaskgridError):
    """tmux is not installed or not on PATH."""

    def __init__(self, message: str = "tmux not found. Install it with your package manager (e.g. 'brew install tmux')."):
        super().__init__(message)


class TmuxCommandError(TaskgridError):
    """A tmux invocation exited non-zero, timed out, or could not be started."""

    def __init__(
        self,
        args: Sequence[str],
        returncode: Optional[int] = None,
        stderr: str = "",
        timed_out: bool = False,
    ):
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        self.timed_out = timed_out
        super().__init__(self._describe())

    def _describe(self) -> str:
        cmd = " ".join(self.command)
        if self.timed_out:
            return f"tmux {cmd}: timed out"
        if self.returncode is None:
            return f"tmux {cmd}: could not be started"
        detail = f": {self.stderr}" if self.stderr else ""
        return f"tmux {cmd}: exit {self.returncode}{detail}"


class PaneSetupError(TaskgridError):
    """The orchestrator's own pane could not be determined.

    Fatal to the current setup or teardown pass.
    """


class ExtraPaneError(TaskgridError):
    """An extra pane could not be created for a task."""


class TaskNotFoundError(TaskgridError):
    """No task with the requested id exists in the task store."""

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Task #{task_id} not found")
