"""
Single choke point for every tmux invocation.

All pane services talk to tmux through TmuxGateway so timeout and error
handling live in one place. The gateway raises TmuxCommandError for any
failed call (non-zero exit, timeout, or failure to start); callers decide
whether that is fatal, logged, or ignored.
"""

import os
from typing import List, Optional, Sequence

from .exceptions import TmuxCommandError
from .logging_config import get_logger
from .models import SplitDirection
from .protocols import TmuxTransport
from .settings import PANE_BORDER_FORMAT, GatewayTimeouts

logger = get_logger("gateway")


class TmuxGateway:
    """Typed tmux command vocabulary over a substitutable transport."""

    def __init__(
        self,
        transport: TmuxTransport,
        timeouts: Optional[GatewayTimeouts] = None,
        env_pane_id: Optional[str] = None,
    ):
        """
        Args:
            transport: runs the actual tmux process (or a mock)
            timeouts: per-call timeout policy
            env_pane_id: the process's own pane from $TMUX_PANE, if known
        """
        self.transport = transport
        self.timeouts = timeouts or GatewayTimeouts()
        self.env_pane_id = env_pane_id

    @classmethod
    def from_environment(cls, transport: TmuxTransport, timeouts: Optional[GatewayTimeouts] = None) -> "TmuxGateway":
        return cls(transport, timeouts, env_pane_id=os.environ.get("TMUX_PANE") or None)

    def run(self, args: Sequence[str], timeout: float, capture: bool = False) -> str:
        """Run a tmux command, returning stripped stdout.

        Raises:
            TmuxCommandError: exit status non-zero, timeout, or not started
        """
        result = self.transport.run(list(args), timeout=timeout, capture=capture)
        if not result.ok:
            error = TmuxCommandError(args, result.returncode, result.stderr, result.timed_out)
            logger.debug(str(error))
            raise error
        return result.stdout.strip() if capture else ""

    # -- queries -------------------------------------------------------------

    def current_pane_id(self) -> str:
        """The pane running this process.

        Prefers $TMUX_PANE, which stays correct even when another pane has
        focus; falls back to asking tmux for the active pane.
        """
        if self.env_pane_id:
            return self.env_pane_id
        pane_id = self.run(["display-message", "-p", "#{pane_id}"], self.timeouts.single, capture=True)
        if not pane_id:
            raise TmuxCommandError(["display-message", "-p", "#{pane_id}"], 0, "empty pane id")
        return pane_id

    def list_window_ids(self, timeout: Optional[float] = None) -> List[str]:
        out = self.run(["list-windows", "-a", "-F", "#{window_id}"], timeout or self.timeouts.probe, capture=True)
        return [line.strip() for line in out.splitlines() if line.strip()]

    def has_session(self, session: str, timeout: Optional[float] = None) -> bool:
        try:
            self.run(["has-session", "-t", session], timeout or self.timeouts.probe)
            return True
        except TmuxCommandError:
            return False

    def list_panes(self, target: str, timeout: Optional[float] = None) -> List[str]:
        """Pane ids of a window, in pane-index order."""
        out = self.run(["list-panes", "-t", target, "-F", "#{pane_id}"], timeout or self.timeouts.single, capture=True)
        return [line.strip() for line in out.splitlines() if line.strip()]

    def pane_exists(self, pane_id: str, timeout: Optional[float] = None) -> bool:
        """Liveness probe; never raises."""
        try:
            out = self.run(
                ["display-message", "-t", pane_id, "-p", "#{pane_id}"],
                timeout or self.timeouts.probe,
                capture=True,
            )
        except TmuxCommandError:
            return False
        return bool(out)

    # -- mutations -----------------------------------------------------------

    def join_pane(
        self,
        source: str,
        target: str,
        direction: SplitDirection,
        size: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        args = ["join-pane", direction.value]
        if size:
            args += ["-l", size]
        args += ["-s", source, "-t", target]
        self.run(args, timeout or self.timeouts.single)

    def split_window(
        self,
        target: str,
        direction: SplitDirection,
        size: Optional[str] = None,
        cwd: Optional[str] = None,
        command: Optional[Sequence[str]] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """Split target and return the new pane's id."""
        args = ["split-window", direction.value, "-P", "-F", "#{pane_id}"]
        if size:
            args += ["-l", size]
        args += ["-t", target]
        if cwd:
            args += ["-c", cwd]
        if command:
            args += list(command)
        pane_id = self.run(args, timeout or self.timeouts.single, capture=True)
        if not pane_id:
            raise TmuxCommandError(args, 0, "split-window returned no pane id")
        return pane_id.splitlines()[0].strip()

    def set_pane_title(self, pane_id: str, title: str, timeout: Optional[float] = None) -> None:
        self.run(["select-pane", "-t", pane_id, "-T", title], timeout or self.timeouts.single)

    def select_pane(self, pane_id: str, timeout: Optional[float] = None) -> None:
        self.run(["select-pane", "-t", pane_id], timeout or self.timeouts.focus)

    def resize_pane(self, pane_id: str, height: str, timeout: Optional[float] = None) -> None:
        self.run(["resize-pane", "-t", pane_id, "-y", height], timeout or self.timeouts.single)

    def break_pane(
        self,
        pane_id: str,
        target_session: Optional[str] = None,
        detached: bool = True,
        timeout: Optional[float] = None,
    ) -> None:
        """Move a pane out into its own window, optionally in another session."""
        args = ["break-pane"]
        if detached:
            args.append("-d")
        args += ["-s", pane_id]
        if target_session:
            args += ["-t", f"{target_session}:"]
        self.run(args, timeout or self.timeouts.single)

    def send_keys(self, pane_id: str, keys: str, enter: bool = True, timeout: Optional[float] = None) -> None:
        args = ["send-keys", "-t", pane_id, keys]
        if enter:
            args.append("Enter")
        self.run(args, timeout or self.timeouts.single)

    def set_option(self, target: str, option: str, value: str, timeout: Optional[float] = None) -> None:
        self.run(["set-option", "-t", target, option, value], timeout or self.timeouts.single)

    def set_border_titles(self, session: str, timeout: Optional[float] = None) -> None:
        """Show each pane's title in its top border."""
        self.set_option(session, "pane-border-status", "top", timeout)
        self.set_option(session, "pane-border-format", PANE_BORDER_FORMAT, timeout)

    def clear_border_titles(self, session: str, timeout: Optional[float] = None) -> None:
        self.set_option(session, "pane-border-status", "off", timeout)
