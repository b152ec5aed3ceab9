"""
Task list for the tiled view: one row per active task with its grid position.
"""

from typing import TYPE_CHECKING

from rich.text import Text
from textual.widgets import Static

from ..layout import truncate_title
from ..status_constants import get_status_display

if TYPE_CHECKING:
    from ..tiled import TiledModel

EMPTY_MESSAGE = "No active tasks running.\n\nStart a task to see it here."

MIN_TITLE_WIDTH = 20


def render_task_rows(model: "TiledModel", width: int = 80) -> Text:
    if not model.tasks:
        return Text(EMPTY_MESSAGE, style="dim", justify="center")

    max_title = max(width - 30, MIN_TITLE_WIDTH)
    text = Text()
    for index, task in enumerate(model.tasks):
        selected = index == model.selected_index
        text.append("▸ " if selected else "  ", style="bold cyan")

        icon, color = get_status_display(task.status)
        text.append(icon, style=color)
        text.append(f" #{task.id} ", style="dim")
        if task.project:
            text.append(f"[{task.project}] ", style="magenta")
        text.append(truncate_title(task.title, max_title), style="bold" if selected else "")

        slot = model.grid_position(index)
        if slot is not None:
            text.append(f" [{slot.row + 1},{slot.col + 1}]", style="dim")
        if model.is_unavailable(index):
            text.append(" unavailable", style="red")
        text.append("\n")
    return text


class TaskRows(Static):
    """Active tasks in grid order, selection marked."""

    def __init__(self, model: "TiledModel", *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.model = model

    def render(self) -> Text:
        return render_task_rows(self.model, self.size.width or 80)
