"""
Bootstrap of the tmux session that hosts the orchestrator TUI.

The tiled view joins task panes into the window running the TUI, so the TUI
must live inside tmux. When started from a plain terminal, the launcher
creates (or reuses) the UI session with the TUI as its first window and
attaches the terminal to it.
"""

import os
import shlex
import sys
from typing import List, Optional

import libtmux
from libtmux.exc import LibTmuxException

from .exceptions import TaskgridError
from .logging_config import get_logger
from .settings import DEFAULT_UI_SESSION

logger = get_logger("launcher")


def tui_command(argv: Optional[List[str]] = None) -> str:
    """Shell command that re-runs ``taskgrid tiled`` inside the UI session."""
    args = argv if argv is not None else [sys.executable, "-m", "taskgrid.cli", "tiled"]
    return " ".join(shlex.quote(a) for a in args)


class UILauncher:
    """Ensures the UI session exists and attaches to it."""

    def __init__(
        self,
        session_name: str = DEFAULT_UI_SESSION,
        socket_name: Optional[str] = None,
        server: Optional[libtmux.Server] = None,
    ):
        self.session_name = session_name
        self.socket_name = socket_name
        self._server = server

    @property
    def server(self) -> libtmux.Server:
        """Lazy-load the tmux server connection."""
        if self._server is None:
            if self.socket_name:
                self._server = libtmux.Server(socket_name=self.socket_name)
            else:
                self._server = libtmux.Server()
        return self._server

    def session_exists(self) -> bool:
        try:
            return self.server.has_session(self.session_name)
        except LibTmuxException:
            return False

    def ensure_session(self, command: str) -> bool:
        """Create the UI session running command unless it already exists.

        Returns:
            True if a new session was created
        """
        if self.session_exists():
            logger.info(f"Reusing tmux session {self.session_name}")
            return False
        try:
            self.server.new_session(
                session_name=self.session_name,
                window_command=command,
                attach=False,
            )
        except LibTmuxException as e:
            raise TaskgridError(f"Failed to create tmux session {self.session_name}: {e}") from e
        logger.info(f"Created tmux session {self.session_name}")
        return True

    def attach_argv(self) -> List[str]:
        argv = ["tmux"]
        if self.socket_name:
            argv += ["-L", self.socket_name]
        return argv + ["attach-session", "-t", self.session_name]

    def attach(self) -> None:
        """Replace this process with a tmux client attached to the UI session."""
        argv = self.attach_argv()
        os.execlp(argv[0], *argv)
