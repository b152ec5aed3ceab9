"""
Real implementations of protocol interfaces.

These are production implementations that shell out to tmux and keep
task and pane records in JSON files under the state directory.
"""

import json
import subprocess
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .logging_config import get_logger
from .models import PaneRecord, TaskRef
from .protocols import CommandResult
from .settings import get_panes_path, get_tasks_path

logger = get_logger("implementations")


class SubprocessTransport:
    """Production implementation of TmuxTransport using subprocess.

    Every call carries a hard timeout; failures are reported through the
    returned CommandResult rather than raised.
    """

    def __init__(self, tmux_binary: str = "tmux", socket_name: Optional[str] = None):
        self.tmux_binary = tmux_binary
        self.socket_name = socket_name

    def _argv(self, args: Sequence[str]) -> List[str]:
        argv = [self.tmux_binary]
        if self.socket_name:
            argv += ["-L", self.socket_name]
        return argv + list(args)

    def run(self, args: Sequence[str], timeout: float, capture: bool = True) -> CommandResult:
        argv = self._argv(args)
        try:
            result = subprocess.run(
                argv,
                timeout=timeout,
                capture_output=True,
                text=True,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(returncode=None, timed_out=True)
        except (OSError, subprocess.SubprocessError) as e:
            return CommandResult(returncode=None, stderr=str(e))
        return CommandResult(
            returncode=result.returncode,
            stdout=result.stdout if capture else "",
            stderr=result.stderr or "",
        )


def read_json(path: Path) -> Optional[Any]:
    try:
        if not path.exists():
            return None
        with open(path, "r") as f:
            return json.load(f)
    except (json.JSONDecodeError, IOError):
        return None


def write_json(path: Path, data: Any) -> bool:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        # Write atomically via temp file
        temp_path = path.with_suffix(".tmp")
        with open(temp_path, "w") as f:
            json.dump(data, f, indent=2)
        temp_path.replace(path)
        return True
    except IOError:
        return False


class JsonTaskStore:
    """Production implementation of TaskStore reading tasks.json.

    The file is a JSON list of task objects (or ``{"tasks": [...]}``) written
    by the task runner. Malformed entries are skipped.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = path or get_tasks_path()

    def _load(self) -> List[TaskRef]:
        data = read_json(self.path)
        if isinstance(data, dict):
            data = data.get("tasks")
        if not isinstance(data, list):
            return []
        tasks = []
        for entry in data:
            if not isinstance(entry, dict):
                continue
            try:
                tasks.append(TaskRef.from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed task entry {entry!r}: {e}")
        return tasks

    def list(self, statuses: Optional[Iterable[str]] = None) -> List[TaskRef]:
        tasks = self._load()
        if statuses is None:
            return tasks
        wanted = set(statuses)
        return [t for t in tasks if t.status in wanted]

    def get(self, task_id: int) -> Optional[TaskRef]:
        for task in self._load():
            if task.id == task_id:
                return task
        return None


class JsonPaneStore:
    """Production implementation of PaneStore backed by panes.json."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path or get_panes_path()
        self._lock = threading.Lock()

    def _load(self) -> List[Dict[str, Any]]:
        data = read_json(self.path)
        if not isinstance(data, list):
            return []
        return [r for r in data if isinstance(r, dict)]

    def create(self, record: PaneRecord) -> bool:
        with self._lock:
            rows = self._load()
            rows.append(record.to_dict())
            return write_json(self.path, rows)

    def list(self, task_id: int) -> List[PaneRecord]:
        records = []
        for row in self._load():
            try:
                record = PaneRecord.from_dict(row)
            except (KeyError, TypeError, ValueError):
                continue
            if record.task_id == task_id:
                records.append(record)
        records.sort(key=lambda r: r.created_at)
        return records

    def delete(self, task_id: int, pane_id: str) -> bool:
        with self._lock:
            rows = self._load()
            kept = [
                r for r in rows
                if not (r.get("task_id") == task_id and r.get("pane_id") == pane_id)
            ]
            if len(kept) == len(rows):
                return False
            return write_json(self.path, kept)
