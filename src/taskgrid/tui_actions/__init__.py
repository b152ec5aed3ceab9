"""
TUI Action Mixins for taskgrid.

These are mixed into TiledApp via multiple inheritance.
"""

from .navigation import GridNavigationActionsMixin
from .panes import PaneActionsMixin

__all__ = [
    "GridNavigationActionsMixin",
    "PaneActionsMixin",
]
