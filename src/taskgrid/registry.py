"""
In-memory table of the panes taskgrid is tracking.

Grid members are keyed by slot index; extra panes are grouped per task.
The registry performs no I/O and is only mutated from the UI thread.
"""

from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from .models import PaneHandle


class PaneRegistry:
    """slot -> grid pane, and task id -> extra panes.

    A pane id is held by at most one entry at a time: putting a handle whose
    pane id is already registered evicts the older entry.
    """

    def __init__(self) -> None:
        self._slots: Dict[int, PaneHandle] = {}
        self._extras: Dict[int, List[PaneHandle]] = {}
        # pane id -> slot index (grid) or ("extra", task id)
        self._where: Dict[str, Union[int, Tuple[str, int]]] = {}

    def __len__(self) -> int:
        return len(self._slots) + sum(len(v) for v in self._extras.values())

    def put(self, slot: int, handle: PaneHandle) -> None:
        if slot < 0:
            raise ValueError(f"slot must be >= 0, got {slot}")
        self._evict(handle.pane_id)
        displaced = self._slots.get(slot)
        if displaced is not None:
            del self._where[displaced.pane_id]
        self._slots[slot] = handle
        self._where[handle.pane_id] = slot

    def get(self, slot: int) -> Optional[PaneHandle]:
        return self._slots.get(slot)

    def add_extra(self, handle: PaneHandle) -> None:
        self._evict(handle.pane_id)
        self._extras.setdefault(handle.task_id, []).append(handle)
        self._where[handle.pane_id] = ("extra", handle.task_id)

    def task_handles(self, task_id: int) -> List[PaneHandle]:
        """All handles (grid and extra) owned by a task."""
        grid = [h for _, h in self.slots() if h.task_id == task_id]
        return grid + list(self._extras.get(task_id, []))

    def remove(self, handle: PaneHandle) -> bool:
        """Remove the entry holding handle's pane id. Returns True if found."""
        return self._evict(handle.pane_id)

    def clear(self) -> None:
        self._slots.clear()
        self._extras.clear()
        self._where.clear()

    def clear_grid(self) -> None:
        for handle in self._slots.values():
            del self._where[handle.pane_id]
        self._slots.clear()

    def replace(self, handles: Sequence[Optional[PaneHandle]]) -> None:
        """Swap in a fresh slot table; None entries leave the slot empty."""
        self.clear_grid()
        for slot, handle in enumerate(handles):
            if handle is not None:
                self.put(slot, handle)

    def slots(self) -> List[Tuple[int, PaneHandle]]:
        """Grid entries ordered by slot index."""
        return sorted(self._slots.items())

    def handles(self) -> Iterator[PaneHandle]:
        for _, handle in self.slots():
            yield handle
        for extras in self._extras.values():
            yield from extras

    def pane_ids(self) -> List[str]:
        return [h.pane_id for h in self.handles()]

    def _evict(self, pane_id: str) -> bool:
        location = self._where.pop(pane_id, None)
        if location is None:
            return False
        if isinstance(location, int):
            del self._slots[location]
            return True
        _, task_id = location
        extras = self._extras[task_id]
        extras[:] = [h for h in extras if h.pane_id != pane_id]
        if not extras:
            del self._extras[task_id]
        return True
