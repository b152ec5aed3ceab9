"""
User configuration loaded from ~/.taskgrid/config.yaml.

Every getter tolerates a missing or malformed file and falls back to the
defaults in settings.py.
"""

from dataclasses import fields, replace
from typing import Any, Dict, Optional

import yaml

from .settings import (
    DEFAULT_AGENT_COMMAND,
    DEFAULT_SHELL_PANE_WIDTH,
    DEFAULT_UI_SESSION,
    SHELL_PANE_WIDTH_MAX,
    SHELL_PANE_WIDTH_MIN,
    GatewayTimeouts,
    get_config_path,
    get_env_tmux_socket,
)

CONFIG_PATH = get_config_path()

CONFIG_TEMPLATE = """\
# taskgrid configuration
# Location: ~/.taskgrid/config.yaml

# tmux session that hosts the orchestrator TUI
# ui_session: task-ui

# tmux socket name (tmux -L); unset uses the default server
# tmux_socket: taskgrid

# Width of extra shell panes, 10%-90%
# shell_pane_width: 50%

# Command started in extra agent panes
# agent_command: claude

# Per-call tmux timeouts in seconds
# timeouts:
#   focus: 0.5
#   probe: 2
#   single: 5
#   teardown: 10
#   setup: 30
"""


def load_config() -> Dict[str, Any]:
    """Load the YAML config, returning {} when absent or invalid."""
    if not CONFIG_PATH.exists():
        return {}
    try:
        with open(CONFIG_PATH) as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, OSError):
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def save_config(data: Dict[str, Any]) -> None:
    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    with open(CONFIG_PATH, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)


def write_config_template(force: bool = False) -> bool:
    """Write the commented template. Returns False if a config already exists."""
    if CONFIG_PATH.exists() and not force:
        return False
    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_PATH.write_text(CONFIG_TEMPLATE)
    return True


def get_timeouts() -> GatewayTimeouts:
    """Gateway timeouts with any valid overrides from config applied."""
    raw = load_config().get("timeouts")
    if not isinstance(raw, dict):
        return GatewayTimeouts()

    known = {f.name for f in fields(GatewayTimeouts)}
    overrides = {}
    for key, value in raw.items():
        if key not in known:
            continue
        try:
            seconds = float(value)
        except (TypeError, ValueError):
            continue
        if seconds > 0:
            overrides[key] = seconds
    return replace(GatewayTimeouts(), **overrides)


def normalize_pane_width(value: Any) -> str:
    """Return value if it is a percentage in the allowed range, else the default."""
    if isinstance(value, str) and value.endswith("%"):
        try:
            percent = int(value[:-1])
        except ValueError:
            return DEFAULT_SHELL_PANE_WIDTH
        if SHELL_PANE_WIDTH_MIN <= percent <= SHELL_PANE_WIDTH_MAX:
            return value
    return DEFAULT_SHELL_PANE_WIDTH


def get_shell_pane_width() -> str:
    return normalize_pane_width(load_config().get("shell_pane_width"))


def get_agent_command() -> str:
    value = load_config().get("agent_command")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return DEFAULT_AGENT_COMMAND


def get_ui_session() -> str:
    value = load_config().get("ui_session")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return DEFAULT_UI_SESSION


def get_tmux_socket() -> Optional[str]:
    """Socket name from TASKGRID_TMUX_SOCKET, then config."""
    env = get_env_tmux_socket()
    if env:
        return env
    value = load_config().get("tmux_socket")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None
