"""
Status bar widget for the tiled view.

Shows the active task count, then either the setup spinner, the grid
dimensions, or the last setup error.
"""

from typing import TYPE_CHECKING, Optional

from rich.text import Text
from textual.widgets import Static

if TYPE_CHECKING:
    from ..tiled import TiledModel


def render_grid_status(model: "TiledModel", now: Optional[float] = None) -> Text:
    """Two-line header for the tiled view."""
    text = Text()
    count = len(model.tasks)
    if count == 0:
        return text

    text.append(f"⊞ Tiled View - {count} Active Tasks\n", style="bold cyan")
    if model.loading:
        text.append(f"{model.spinner_frame(now)} Setting up agent panes...", style="yellow")
    elif model.error:
        text.append(f"Pane setup failed: {model.error}", style="red")
    elif model.panes_setup:
        cols, rows = model.layout.cols, model.layout.rows
        text.append(f"{cols}×{rows} grid • Use arrow keys to navigate • esc to exit", style="dim")
    return text


class GridStatusBar(Static):
    """Header line above the task rows."""

    def __init__(self, model: "TiledModel", *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.model = model

    def render(self) -> Text:
        return render_grid_status(self.model)
