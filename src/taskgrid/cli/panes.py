"""
Pane commands: list, shell, agent, break, cleanup, remove.
"""

from typing import Annotated, Optional

import typer
from rich import print as rprint
from rich.table import Table

from . import _shared
from ._shared import TaskIdArgument, console, exit_on_error, panes_app


def _detail(task_id: int, locate: bool = True):
    from ..acquisition import PaneAcquisitionService
    from ..config import get_agent_command, get_ui_session
    from ..detail import DetailPanes
    from ..extra_panes import ExtraPaneManager

    task = _shared.load_task(task_id)
    gateway = _shared.make_gateway()
    manager = ExtraPaneManager(
        gateway,
        pane_store=_shared.make_pane_store(),
        agent_command=get_agent_command(),
    )
    detail = DetailPanes(task, manager, PaneAcquisitionService(gateway, get_ui_session()))
    if locate:
        detail.locate()
    return detail


@panes_app.command("list")
@exit_on_error
def panes_list(task_id: TaskIdArgument):
    """List a task's primary and extra panes."""
    detail = _detail(task_id)
    panes = detail.panes()
    if not panes:
        rprint(f"[dim]No panes found for task #{task_id}[/dim]")
        return

    gateway = detail.manager.gateway
    table = Table(show_header=True, header_style="bold")
    table.add_column("Pane")
    table.add_column("Type")
    table.add_column("Title")
    table.add_column("Alive")
    for handle in panes:
        alive = gateway.pane_exists(handle.pane_id)
        table.add_row(
            handle.pane_id,
            handle.role.value,
            handle.title,
            "[green]yes[/green]" if alive else "[red]no[/red]",
        )
    console.print(table)


@panes_app.command("shell")
@exit_on_error
def panes_shell(
    task_id: TaskIdArgument,
    width: Annotated[
        Optional[str], typer.Option("--width", "-w", help="Pane width, 10%-90%")
    ] = None,
):
    """Open an extra shell beside the task's agent pane."""
    from ..config import get_shell_pane_width, normalize_pane_width

    pane_width = normalize_pane_width(width) if width else get_shell_pane_width()
    if width and pane_width != width:
        rprint(f"[yellow]Width {width} out of range, using {pane_width}[/yellow]")
    handle = _detail(task_id).new_shell(pane_width)
    rprint(f"[green]✓[/green] Opened shell pane [bold]{handle.pane_id}[/bold] for task #{task_id}")


@panes_app.command("agent")
@exit_on_error
def panes_agent(task_id: TaskIdArgument):
    """Open a second interactive agent below the task's agent pane."""
    handle = _detail(task_id).new_agent()
    rprint(f"[green]✓[/green] Opened agent pane [bold]{handle.pane_id}[/bold] for task #{task_id}")


@panes_app.command("break")
@exit_on_error
def panes_break(task_id: TaskIdArgument):
    """Break every extra pane of the task away into its own window."""
    broken = _detail(task_id, locate=False).break_extras()
    rprint(f"Broke {len(broken)} extra pane(s) for task #{task_id}")


@panes_app.command("cleanup")
@exit_on_error
def panes_cleanup(task_id: TaskIdArgument):
    """Break every pane of the task away, primary panes included."""
    broken = _detail(task_id).cleanup()
    rprint(f"Broke {len(broken)} pane(s) for task #{task_id}")


@panes_app.command("remove")
@exit_on_error
def panes_remove(
    task_id: TaskIdArgument,
    pane_id: Annotated[str, typer.Argument(help="tmux pane id, e.g. %12")],
):
    """Break one extra pane away and forget it."""
    if _detail(task_id, locate=False).remove(pane_id):
        rprint(f"[green]✓[/green] Removed pane {pane_id}")
    else:
        rprint(f"[red]Error: {pane_id} is not a live extra pane of task #{task_id}[/red]")
        raise typer.Exit(code=1)
