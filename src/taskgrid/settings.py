"""
Paths, environment overrides and fixed constants for taskgrid.

Environment variables:
    TASKGRID_DIR          Base directory (default: ~/.taskgrid)
    TASKGRID_STATE_DIR    State directory holding tasks.json / panes.json
    TASKGRID_TMUX_SOCKET  tmux socket name (-L) for test isolation
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


# =============================================================================
# Paths
# =============================================================================

def get_base_dir() -> Path:
    env = os.environ.get("TASKGRID_DIR")
    if env:
        return Path(env)
    return Path.home() / ".taskgrid"


def get_state_dir() -> Path:
    env = os.environ.get("TASKGRID_STATE_DIR")
    if env:
        return Path(env)
    return get_base_dir()


def get_log_dir() -> Path:
    return get_base_dir() / "logs"


def get_tasks_path() -> Path:
    return get_state_dir() / "tasks.json"


def get_panes_path() -> Path:
    return get_state_dir() / "panes.json"


def get_config_path() -> Path:
    return get_base_dir() / "config.yaml"


def get_env_tmux_socket() -> Optional[str]:
    return os.environ.get("TASKGRID_TMUX_SOCKET") or None


# =============================================================================
# tmux layout constants
# =============================================================================

# tmux session hosting the orchestrator TUI
DEFAULT_UI_SESSION = "task-ui"

# Orchestrator strip height while the grid is shown, and grid share of the rest
RESERVED_STRIP = "10%"
GRID_SHARE = "90%"
FULL_SIZE = "100%"

# Hard cap for the "#<id>: <title>" pane border title
PANE_TITLE_MAX = 20

PANE_BORDER_FORMAT = " #{pane_title} "

DEFAULT_SHELL = "/bin/zsh"
DEFAULT_SHELL_PANE_WIDTH = "50%"
SHELL_PANE_WIDTH_MIN = 10
SHELL_PANE_WIDTH_MAX = 90
DEFAULT_AGENT_COMMAND = "claude"

SHELL_PANE_TITLE = "Shell"
AGENT_PANE_TITLE = "Claude"

# Spinner shown while panes are being joined (advanced every tick)
SPINNER_FRAMES = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]
SPINNER_TICK_SECONDS = 0.1

# How often the TUI re-reads the task store
TASK_REFRESH_SECONDS = 5.0


# =============================================================================
# Gateway timeouts
# =============================================================================

@dataclass(frozen=True)
class GatewayTimeouts:
    """Per-call timeouts in seconds for tmux invocations."""

    focus: float = 0.5
    probe: float = 2.0
    single: float = 5.0
    teardown: float = 10.0
    setup: float = 30.0
