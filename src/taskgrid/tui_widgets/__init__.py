"""
TUI Widget components for taskgrid.
"""

from .grid_status_bar import GridStatusBar
from .task_rows import TaskRows

__all__ = [
    "GridStatusBar",
    "TaskRows",
]
