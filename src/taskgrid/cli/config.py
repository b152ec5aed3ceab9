"""
Config commands: init, show, path.
"""

from typing import Annotated

import typer
from rich import print as rprint

from ._shared import config_app


@config_app.callback(invoke_without_command=True)
def config_default(ctx: typer.Context):
    """Show the effective configuration (default with no subcommand)."""
    if ctx.invoked_subcommand is None:
        _config_show()


@config_app.command("init")
def config_init(
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Replace an existing config.yaml")
    ] = False,
):
    """Write a commented config.yaml template.

    Every option in the template is commented out, so a fresh file changes
    nothing until edited.
    """
    from .. import config

    if not config.write_config_template(force=force):
        rprint(f"[yellow]Config file already exists:[/yellow] {config.CONFIG_PATH}")
        rprint("[dim]Pass --force to replace it[/dim]")
        raise typer.Exit(1)

    rprint(f"[green]✓[/green] Wrote config template to [bold]{config.CONFIG_PATH}[/bold]")


@config_app.command("show")
def config_show():
    """Show the effective configuration."""
    _config_show()


def _config_show():
    from .. import config

    if not config.CONFIG_PATH.exists():
        rprint(f"[dim]No config file found at {config.CONFIG_PATH}[/dim]")
        rprint("[dim]Run 'taskgrid config init' for a template[/dim]")
        return

    raw = config.load_config()
    if not raw:
        rprint(f"[dim]Config file is empty: {config.CONFIG_PATH}[/dim]")
        return

    rprint(f"[bold]Configuration[/bold] ({config.CONFIG_PATH}):\n")
    rprint(f"  ui_session: {config.get_ui_session()}")
    rprint(f"  tmux_socket: {config.get_tmux_socket() or '(default)'}")

    width = config.get_shell_pane_width()
    configured = raw.get("shell_pane_width")
    if configured is not None and configured != width:
        rprint(f"  shell_pane_width: {width} [yellow](ignored invalid value {configured!r})[/yellow]")
    else:
        rprint(f"  shell_pane_width: {width}")

    rprint(f"  agent_command: {config.get_agent_command()}")
    timeouts = config.get_timeouts()
    rprint("  timeouts:")
    for name in ("focus", "probe", "single", "teardown", "setup"):
        rprint(f"    {name}: {getattr(timeouts, name)}s")


@config_app.command("path")
def config_path():
    """Print where config.yaml is read from."""
    from .. import config
    print(config.CONFIG_PATH)
