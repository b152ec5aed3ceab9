"""
Tiled view commands: tiled, layout.
"""

from typing import Annotated, List, Optional

import typer
from rich import print as rprint
from rich.table import Table

from . import _shared
from ._shared import app, console, exit_on_error


@app.command()
@exit_on_error
def tiled():
    """Show every active task's agent pane in one tmux window.

    Outside tmux, the UI session is created (or reused) and attached, with
    the tiled view running in it.
    """
    from ..config import get_agent_command, get_shell_pane_width, get_tmux_socket, get_ui_session
    from ..dependency_check import in_tmux, require_tmux
    from ..launcher import UILauncher, tui_command

    require_tmux()
    ui_session = get_ui_session()

    if not in_tmux():
        launcher = UILauncher(ui_session, socket_name=get_tmux_socket())
        launcher.ensure_session(tui_command())
        launcher.attach()
        return

    from ..tui import run_tui

    run_tui(
        _shared.make_task_store(),
        gateway=_shared.make_gateway(),
        pane_store=_shared.make_pane_store(),
        ui_session=ui_session,
        shell_pane_width=get_shell_pane_width(),
        agent_command=get_agent_command(),
    )


@app.command()
def layout(
    count: Annotated[int, typer.Argument(help="Number of active tasks")],
):
    """Print the grid planned for COUNT tasks and how each slot is split.

    Examples:
        taskgrid layout 4     # 2x2
        taskgrid layout 7     # 3x3
    """
    from ..layout import plan_grid, plan_split, slot_for_index

    if count < 0:
        rprint("[red]Error: count cannot be negative[/red]")
        raise typer.Exit(code=1)

    grid = plan_grid(count)
    rprint(f"[bold]{count} tasks[/bold] → {grid.cols}×{grid.rows} grid")
    if count == 0:
        return

    labels: List[Optional[str]] = [f"slot {i}" for i in range(count)]
    table = Table(show_header=True, header_style="bold")
    table.add_column("Slot", justify="right")
    table.add_column("Row,Col")
    table.add_column("Joined by")

    for index in range(count):
        slot = slot_for_index(index, grid.cols)
        if index == 0:
            how = "-v 90% below the orchestrator pane"
        else:
            plan = plan_split(index, grid, labels)
            if plan is None:
                how = "[red]no pane to split[/red]"
            else:
                how = f"{plan.direction.value} from {plan.target_pane_id}"
                if plan.fallback:
                    how += " [yellow](fallback)[/yellow]"
        table.add_row(str(index), f"{slot.row + 1},{slot.col + 1}", how)

    console.print(table)
