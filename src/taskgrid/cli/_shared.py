"""
Shared CLI state: Typer apps, console, error handling, and service factories.
"""

import functools
from typing import Annotated

import typer
from rich import print as rprint
from rich.console import Console

from ..exceptions import TaskgridError, TaskNotFoundError
from ..models import TaskRef

# Main app
app = typer.Typer(
    name="taskgrid",
    help="Tile running agent tasks as tmux panes and manage their extra panes",
    no_args_is_help=False,
    invoke_without_command=True,
    rich_markup_mode="rich",
)

# Panes subcommand group
panes_app = typer.Typer(
    name="panes",
    help="Manage the primary and extra panes of one task.",
    no_args_is_help=True,
)
app.add_typer(panes_app, name="panes")

# Config subcommand group
config_app = typer.Typer(
    name="config",
    help="Manage configuration",
    no_args_is_help=False,
    invoke_without_command=True,
)
app.add_typer(config_app, name="config")

# Console for rich output
console = Console()

TaskIdArgument = Annotated[int, typer.Argument(help="Task id")]


def exit_on_error(func):
    """Report TaskgridError as a red message and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except TaskgridError as e:
            rprint(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)

    return wrapper


def make_gateway():
    """Gateway over the real tmux binary, honouring socket and timeout config."""
    from ..config import get_timeouts, get_tmux_socket
    from ..gateway import TmuxGateway
    from ..implementations import SubprocessTransport

    transport = SubprocessTransport(socket_name=get_tmux_socket())
    return TmuxGateway.from_environment(transport, get_timeouts())


def make_task_store():
    from ..implementations import JsonTaskStore

    return JsonTaskStore()


def make_pane_store():
    from ..implementations import JsonPaneStore

    return JsonPaneStore()


def load_task(task_id: int) -> TaskRef:
    task = make_task_store().get(task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    return task


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log debug output to stderr")
    ] = False,
):
    """Launch the tiled view when no command is given."""
    from ..logging_config import setup_cli_logging

    setup_cli_logging(verbose)
    if ctx.invoked_subcommand is None:
        from .tiled import tiled

        tiled()
