"""
Task status constants and display mappings.

Task status values are owned by the task store; taskgrid only reads them
to decide which tasks are tiled and how each row is drawn.
"""

from typing import Tuple


# =============================================================================
# Task Status Values
# =============================================================================

STATUS_BACKLOG = "backlog"
STATUS_QUEUED = "queued"
STATUS_PROCESSING = "processing"
STATUS_BLOCKED = "blocked"
STATUS_DONE = "done"
STATUS_ARCHIVED = "archived"

# Tasks with a live agent pane worth tiling
ACTIVE_STATUSES = frozenset({STATUS_QUEUED, STATUS_PROCESSING})


# =============================================================================
# Display
# =============================================================================

STATUS_ICONS = {
    STATUS_BACKLOG: "◦",
    STATUS_QUEUED: "◷",
    STATUS_PROCESSING: "⋯",
    STATUS_BLOCKED: "!",
    STATUS_DONE: "✓",
    STATUS_ARCHIVED: "·",
}

STATUS_COLORS = {
    STATUS_BACKLOG: "dim",
    STATUS_QUEUED: "yellow",
    STATUS_PROCESSING: "cyan",
    STATUS_BLOCKED: "red",
    STATUS_DONE: "green",
    STATUS_ARCHIVED: "dim",
}


def is_active_status(status: str) -> bool:
    return status in ACTIVE_STATUSES


def get_status_display(status: str) -> Tuple[str, str]:
    """Return (icon, rich color) for a task status."""
    return STATUS_ICONS.get(status, "?"), STATUS_COLORS.get(status, "white")
