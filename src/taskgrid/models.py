"""
Core data types shared by the layout, registry and pane services.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from .status_constants import is_active_status


@dataclass(frozen=True)
class TaskRef:
    """Read-only view of a task owned by the task store."""

    id: int
    title: str
    status: str
    daemon_session: str = ""  # e.g. "task-daemon-12345"
    window_id: str = ""  # tmux window id, e.g. "@1234"
    project: str = ""
    worktree_path: str = ""
    port: int = 0

    @property
    def is_active(self) -> bool:
        return is_active_status(self.status)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskRef":
        return cls(
            id=int(data["id"]),
            title=str(data.get("title", "")),
            status=str(data.get("status", "")),
            daemon_session=str(data.get("daemon_session") or ""),
            window_id=str(data.get("window_id") or ""),
            project=str(data.get("project") or ""),
            worktree_path=str(data.get("worktree_path") or ""),
            port=int(data.get("port") or 0),
        )


@dataclass(frozen=True)
class GridLayout:
    cols: int
    rows: int

    @property
    def capacity(self) -> int:
        return self.cols * self.rows


@dataclass(frozen=True)
class GridSlot:
    row: int
    col: int


class PaneRole(Enum):
    """What a tracked pane is for. Values are the durable pane-type strings."""

    GRID_MEMBER = "grid"
    EXTRA_SHELL = "shell-extra"
    EXTRA_AGENT = "claude-extra"
    PRIMARY_AGENT = "claude"
    PRIMARY_SHELL = "shell"

    @property
    def is_extra(self) -> bool:
        if self is PaneRole.EXTRA_SHELL or self is PaneRole.EXTRA_AGENT:
            return True
        if self is PaneRole.GRID_MEMBER or self is PaneRole.PRIMARY_AGENT or self is PaneRole.PRIMARY_SHELL:
            return False
        raise ValueError(f"Unhandled pane role: {self!r}")


class SplitDirection(Enum):
    """tmux split flag: HORIZONTAL places panes side by side."""

    HORIZONTAL = "-h"
    VERTICAL = "-v"


@dataclass(frozen=True)
class PaneHandle:
    """A tmux pane this subsystem created or moved."""

    pane_id: str  # tmux pane id, e.g. "%12"
    role: PaneRole
    task_id: int
    origin_session: str = ""
    origin_window: str = ""
    title: str = ""


@dataclass
class PaneRecord:
    """Durable record of a task-linked pane (stored by the pane store)."""

    task_id: int
    pane_id: str
    role: PaneRole
    title: str = ""
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "pane_id": self.pane_id,
            "pane_type": self.role.value,
            "title": self.title,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaneRecord":
        created_raw: Optional[str] = data.get("created_at")
        try:
            created = datetime.fromisoformat(created_raw) if created_raw else datetime.now()
        except ValueError:
            created = datetime.now()
        return cls(
            task_id=int(data["task_id"]),
            pane_id=str(data["pane_id"]),
            role=PaneRole(data["pane_type"]),
            title=str(data.get("title") or ""),
            created_at=created,
        )

    def to_handle(self) -> PaneHandle:
        return PaneHandle(pane_id=self.pane_id, role=self.role, task_id=self.task_id, title=self.title)
