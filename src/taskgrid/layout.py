"""
Pure grid planning functions.

Everything here is deterministic and free of I/O so the layout rules can be
tested without tmux.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from .models import GridLayout, GridSlot, SplitDirection, TaskRef
from .settings import PANE_TITLE_MAX


def plan_grid(count: int) -> GridLayout:
    """Map a task count to a near-square (cols, rows) grid.

    Wider-than-tall layouts are preferred since terminals usually are.
    """
    if count <= 0:
        return GridLayout(0, 0)
    if count == 1:
        return GridLayout(1, 1)
    if count == 2:
        return GridLayout(2, 1)
    if count == 3:
        return GridLayout(3, 1)
    if count == 4:
        return GridLayout(2, 2)
    if count <= 6:
        return GridLayout(3, 2)
    if count <= 9:
        return GridLayout(3, 3)
    if count <= 12:
        return GridLayout(4, 3)
    return GridLayout(4, (count + 3) // 4)


def slot_for_index(index: int, cols: int) -> GridSlot:
    """Row-major grid position of the 0-based index."""
    if cols <= 0:
        raise ValueError(f"cols must be positive, got {cols}")
    return GridSlot(row=index // cols, col=index % cols)


@dataclass(frozen=True)
class SplitPlan:
    """Where and how to join the pane for one grid slot."""

    target_pane_id: str
    direction: SplitDirection
    fallback: bool = False


def plan_split(index: int, layout: GridLayout, pane_ids: Sequence[Optional[str]]) -> Optional[SplitPlan]:
    """Choose the join target for slot ``index`` (>= 1).

    A slot starting a new row splits vertically from the first slot of the
    previous row; any other slot splits horizontally from its left neighbour.
    When that pane is missing, fall back to slot 0 with the direction implied
    by the column. Returns None when slot 0 is missing too.
    """
    if index <= 0 or layout.cols <= 0:
        return None

    slot = slot_for_index(index, layout.cols)

    if slot.col == 0:
        anchor = (slot.row - 1) * layout.cols
        target = _pane_at(pane_ids, anchor)
        if target:
            return SplitPlan(target, SplitDirection.VERTICAL)
    else:
        target = _pane_at(pane_ids, index - 1)
        if target:
            return SplitPlan(target, SplitDirection.HORIZONTAL)

    first = _pane_at(pane_ids, 0)
    if not first:
        return None
    direction = SplitDirection.VERTICAL if slot.col == 0 else SplitDirection.HORIZONTAL
    return SplitPlan(first, direction, fallback=True)


def _pane_at(pane_ids: Sequence[Optional[str]], index: int) -> Optional[str]:
    if 0 <= index < len(pane_ids):
        return pane_ids[index] or None
    return None


def truncate_title(title: str, max_len: int) -> str:
    """Cap title at max_len characters, ending in an ellipsis when cut."""
    if len(title) <= max_len:
        return title
    if max_len <= 1:
        return "…"[:max_len]
    return title[: max_len - 1] + "…"


def pane_title(task: TaskRef, max_len: int = PANE_TITLE_MAX) -> str:
    """Border title for a task's grid pane, e.g. ``#42: Fix login bug``."""
    return f"#{task.id}: {truncate_title(task.title, max_len)}"
