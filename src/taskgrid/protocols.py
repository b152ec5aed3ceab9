"""
Protocol definitions for external collaborators.

These interfaces allow dependency injection for testing, enabling us to
swap real implementations (subprocess calls to tmux, JSON files) with
mock implementations in tests.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Sequence, runtime_checkable

from .models import PaneRecord, TaskRef


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one tmux invocation.

    ``returncode`` is None when the process could not be started or was
    killed on timeout.
    """

    returncode: Optional[int]
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


@runtime_checkable
class TmuxTransport(Protocol):
    """Runs a single tmux command."""

    def run(self, args: Sequence[str], timeout: float, capture: bool = True) -> CommandResult:
        """Run ``tmux <args>``.

        Args:
            args: tmux subcommand and arguments (without the tmux binary)
            timeout: hard limit in seconds
            capture: whether stdout should be captured

        Returns:
            CommandResult; never raises for process failures
        """
        ...


@runtime_checkable
class TaskStore(Protocol):
    """Read-only access to task records."""

    def list(self, statuses: Optional[Iterable[str]] = None) -> List[TaskRef]:
        """List tasks, optionally restricted to the given statuses."""
        ...

    def get(self, task_id: int) -> Optional[TaskRef]:
        """Get one task, or None if it doesn't exist."""
        ...


@runtime_checkable
class PaneStore(Protocol):
    """Durable task-linked pane records."""

    def create(self, record: PaneRecord) -> bool:
        """Persist a pane record. Returns True on success."""
        ...

    def list(self, task_id: int) -> List[PaneRecord]:
        """All records for a task in creation order."""
        ...

    def delete(self, task_id: int, pane_id: str) -> bool:
        """Delete one record. Returns True if something was removed."""
        ...
