"""
Environment check: doctor.
"""

import typer
from rich import print as rprint

from ._shared import app


def _mark(ok: bool, required: bool = False) -> str:
    if ok:
        return "[green]✓[/green]"
    return "[red]✗[/red]" if required else "[yellow]-[/yellow]"


@app.command()
def doctor():
    """Check tmux, the UI session and taskgrid's paths."""
    from ..config import CONFIG_PATH, get_tmux_socket, get_ui_session
    from ..dependency_check import check_tmux, in_tmux, tmux_supports_grid
    from ..launcher import UILauncher
    from ..settings import get_log_dir, get_panes_path, get_tasks_path

    available, path, version = check_tmux()
    if available:
        recent = tmux_supports_grid(version)
        note = "" if recent else " [red]too old for the tiled view[/red]"
        rprint(f"{_mark(recent, required=True)} tmux: {path} ({version or 'unknown version'}){note}")
    else:
        rprint(f"{_mark(False, required=True)} tmux: not found")

    inside = in_tmux()
    rprint(f"{_mark(inside)} inside tmux: {'yes' if inside else 'no'}")

    if available:
        ui_session = get_ui_session()
        running = UILauncher(ui_session, socket_name=get_tmux_socket()).session_exists()
        rprint(f"{_mark(running)} UI session {ui_session}: {'running' if running else 'not running'}")

    tasks_path = get_tasks_path()
    rprint(f"{_mark(tasks_path.exists())} tasks: {tasks_path}")
    rprint(f"  panes: {get_panes_path()}")
    rprint(f"  config: {CONFIG_PATH}{'' if CONFIG_PATH.exists() else ' (not created)'}")
    rprint(f"  logs: {get_log_dir()}")

    if not available:
        raise typer.Exit(code=1)
