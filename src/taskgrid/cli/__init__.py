"""
CLI interface for taskgrid using Typer.
"""

# Import shared state (apps, options, utilities) first
from ._shared import app, main_callback  # noqa: F401

# Import submodules to register their commands with the Typer apps
from . import tiled  # noqa: F401
from . import panes  # noqa: F401
from . import doctor  # noqa: F401
from . import config  # noqa: F401


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
