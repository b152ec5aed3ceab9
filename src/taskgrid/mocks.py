"""
Mock implementations of protocol interfaces for testing.

MockTransport keeps a small in-memory model of tmux (sessions, windows,
panes) and interprets the subset of commands the gateway issues, so pane
services can be exercised end to end without a tmux server.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .models import PaneRecord, TaskRef
from .protocols import CommandResult


@dataclass
class MockPane:
    pane_id: str
    window_id: str
    title: str = ""
    height: int = 50
    cwd: str = ""
    command: List[str] = field(default_factory=list)
    sent_keys: List[str] = field(default_factory=list)


@dataclass
class MockWindow:
    window_id: str
    session: str
    index: int
    panes: List[str] = field(default_factory=list)


class MockTransport:
    """Production-free implementation of TmuxTransport.

    Failure injection:
        fail_on(predicate) makes any call whose argv satisfies the predicate
        exit with status 1; timeout_on(predicate) makes it time out.
    """

    def __init__(self) -> None:
        self.sessions: Dict[str, List[str]] = {}  # session -> window ids
        self.windows: Dict[str, MockWindow] = {}
        self.panes: Dict[str, MockPane] = {}
        self.options: Dict[Tuple[str, str], str] = {}
        self.active_pane: Optional[str] = None
        self.calls: List[List[str]] = []
        self._next_window = 1
        self._next_pane = 1
        self._failures: List[Callable[[List[str]], bool]] = []
        self._timeouts: List[Callable[[List[str]], bool]] = []

    # -- scenario setup ------------------------------------------------------

    def add_session(self, session: str) -> str:
        """Create a session with one window holding one pane. Returns the pane id."""
        self.sessions.setdefault(session, [])
        window_id = self._new_window(session)
        return self._new_pane(window_id)

    def add_window(self, session: str) -> Tuple[str, str]:
        """Add a window with one pane to session. Returns (window_id, pane_id)."""
        self.sessions.setdefault(session, [])
        window_id = self._new_window(session)
        return window_id, self._new_pane(window_id)

    def fail_on(self, predicate: Callable[[List[str]], bool]) -> None:
        self._failures.append(predicate)

    def timeout_on(self, predicate: Callable[[List[str]], bool]) -> None:
        self._timeouts.append(predicate)

    def kill_pane(self, pane_id: str) -> None:
        self._detach_pane(pane_id)
        self.panes.pop(pane_id, None)

    def commands(self, name: str) -> List[List[str]]:
        """All recorded calls of one tmux subcommand."""
        return [c for c in self.calls if c and c[0] == name]

    def window_of(self, pane_id: str) -> Optional[MockWindow]:
        pane = self.panes.get(pane_id)
        return self.windows.get(pane.window_id) if pane else None

    def session_of(self, pane_id: str) -> Optional[str]:
        window = self.window_of(pane_id)
        return window.session if window else None

    # -- TmuxTransport -------------------------------------------------------

    def run(self, args: Sequence[str], timeout: float, capture: bool = True) -> CommandResult:
        argv = list(args)
        self.calls.append(argv)
        if any(p(argv) for p in self._timeouts):
            return CommandResult(returncode=None, timed_out=True)
        if any(p(argv) for p in self._failures):
            return CommandResult(returncode=1, stderr="injected failure")
        handler = getattr(self, "_cmd_" + argv[0].replace("-", "_"), None)
        if handler is None:
            return CommandResult(returncode=1, stderr=f"unknown command {argv[0]}")
        try:
            out = handler(argv[1:])
        except LookupError as e:
            return CommandResult(returncode=1, stderr=str(e))
        return CommandResult(returncode=0, stdout=(out or "") if capture else "")

    # -- internals -----------------------------------------------------------

    def _new_window(self, session: str) -> str:
        window_id = f"@{self._next_window}"
        self._next_window += 1
        index = len(self.sessions[session])
        self.windows[window_id] = MockWindow(window_id, session, index)
        self.sessions[session].append(window_id)
        return window_id

    def _new_pane(self, window_id: str, after: Optional[str] = None) -> str:
        pane_id = f"%{self._next_pane}"
        self._next_pane += 1
        self.panes[pane_id] = MockPane(pane_id, window_id)
        self._insert_pane(pane_id, window_id, after)
        return pane_id

    def _insert_pane(self, pane_id: str, window_id: str, after: Optional[str]) -> None:
        window = self.windows[window_id]
        if after in window.panes:
            window.panes.insert(window.panes.index(after) + 1, pane_id)
        else:
            window.panes.append(pane_id)
        self.panes[pane_id].window_id = window_id

    def _detach_pane(self, pane_id: str) -> None:
        window = self.window_of(pane_id)
        if window is None:
            return
        window.panes.remove(pane_id)
        if not window.panes:
            del self.windows[window.window_id]
            self.sessions[window.session].remove(window.window_id)

    def _resolve_window(self, target: str) -> MockWindow:
        if target.startswith("@"):
            if target in self.windows:
                return self.windows[target]
        elif target.startswith("%"):
            window = self.window_of(target)
            if window:
                return window
        else:
            session, _, index = target.partition(":")
            window_ids = self.sessions.get(session)
            if window_ids:
                if index == "":
                    return self.windows[window_ids[0]]
                for wid in window_ids:
                    if str(self.windows[wid].index) == index:
                        return self.windows[wid]
        raise LookupError(f"can't find window: {target}")

    def _resolve_pane(self, target: str) -> str:
        if target in self.panes:
            return target
        if target.startswith("%"):
            raise LookupError(f"can't find pane: {target}")
        window = self._resolve_window(target)
        return window.panes[0]

    @staticmethod
    def _opts(args: List[str], flags: Iterable[str], valued: Iterable[str]) -> Tuple[Dict[str, str], List[str]]:
        flags, valued = set(flags), set(valued)
        opts: Dict[str, str] = {}
        rest: List[str] = []
        i = 0
        while i < len(args):
            arg = args[i]
            if arg in valued and i + 1 < len(args):
                opts[arg] = args[i + 1]
                i += 2
            elif arg in flags:
                opts[arg] = ""
                i += 1
            else:
                rest.append(arg)
                i += 1
        return opts, rest

    def _format(self, fmt: str, pane_id: str) -> str:
        pane = self.panes[pane_id]
        return (
            fmt.replace("#{pane_id}", pane.pane_id)
            .replace("#{pane_title}", pane.title)
            .replace("#{window_id}", pane.window_id)
        )

    # -- commands ------------------------------------------------------------

    def _cmd_display_message(self, args: List[str]) -> str:
        opts, rest = self._opts(args, ["-p"], ["-t"])
        target = opts.get("-t")
        pane_id = self._resolve_pane(target) if target else self.active_pane
        if pane_id is None or pane_id not in self.panes:
            raise LookupError("no current pane")
        return self._format(rest[0] if rest else "", pane_id)

    def _cmd_list_windows(self, args: List[str]) -> str:
        return "\n".join(self.windows)

    def _cmd_has_session(self, args: List[str]) -> str:
        opts, _ = self._opts(args, [], ["-t"])
        session = opts.get("-t", "")
        if session not in self.sessions:
            raise LookupError(f"can't find session: {session}")
        return ""

    def _cmd_list_panes(self, args: List[str]) -> str:
        opts, _ = self._opts(args, [], ["-t", "-F"])
        window = self._resolve_window(opts.get("-t", ""))
        return "\n".join(self._format(opts.get("-F", "#{pane_id}"), p) for p in window.panes)

    def _cmd_join_pane(self, args: List[str]) -> str:
        opts, _ = self._opts(args, ["-h", "-v", "-d"], ["-l", "-s", "-t"])
        source = self._resolve_pane(opts["-s"])
        target = self._resolve_pane(opts["-t"])
        if source == target:
            raise LookupError("source and target are the same pane")
        self._detach_pane(source)
        self._insert_pane(source, self.panes[target].window_id, target)
        if "-d" not in opts:
            self.active_pane = source
        return ""

    def _cmd_split_window(self, args: List[str]) -> str:
        opts, rest = self._opts(args, ["-h", "-v", "-P", "-d"], ["-l", "-t", "-c", "-F"])
        target = self._resolve_pane(opts["-t"])
        pane_id = self._new_pane(self.panes[target].window_id, after=target)
        self.panes[pane_id].cwd = opts.get("-c", "")
        self.panes[pane_id].command = rest
        if "-d" not in opts:
            self.active_pane = pane_id
        return self._format(opts.get("-F", "#{pane_id}"), pane_id) if "-P" in opts else ""

    def _cmd_select_pane(self, args: List[str]) -> str:
        opts, _ = self._opts(args, [], ["-t", "-T"])
        pane_id = self._resolve_pane(opts["-t"])
        if "-T" in opts:
            self.panes[pane_id].title = opts["-T"]
        else:
            self.active_pane = pane_id
        return ""

    def _cmd_resize_pane(self, args: List[str]) -> str:
        opts, _ = self._opts(args, [], ["-t", "-y", "-x"])
        pane_id = self._resolve_pane(opts["-t"])
        height = opts.get("-y", "")
        if height.endswith("%"):
            self.panes[pane_id].height = int(height[:-1])
        return ""

    def _cmd_break_pane(self, args: List[str]) -> str:
        opts, _ = self._opts(args, ["-d"], ["-s", "-t"])
        pane_id = self._resolve_pane(opts["-s"])
        dest = opts.get("-t")
        if dest:
            session = dest.rstrip(":")
            if session not in self.sessions:
                raise LookupError(f"can't find session: {session}")
        else:
            session = self.session_of(pane_id) or ""
        self._detach_pane(pane_id)
        window_id = self._new_window(session)
        self._insert_pane(pane_id, window_id, None)
        return ""

    def _cmd_send_keys(self, args: List[str]) -> str:
        opts, rest = self._opts(args, [], ["-t"])
        pane_id = self._resolve_pane(opts["-t"])
        self.panes[pane_id].sent_keys.extend(rest)
        return ""

    def _cmd_set_option(self, args: List[str]) -> str:
        opts, rest = self._opts(args, [], ["-t"])
        if len(rest) < 2:
            raise LookupError("set-option needs an option and a value")
        self.options[(opts.get("-t", ""), rest[0])] = rest[1]
        return ""


class MockTaskStore:
    """In-memory TaskStore."""

    def __init__(self, tasks: Optional[Iterable[TaskRef]] = None):
        self.tasks: List[TaskRef] = list(tasks or [])

    def list(self, statuses: Optional[Iterable[str]] = None) -> List[TaskRef]:
        if statuses is None:
            return list(self.tasks)
        wanted = set(statuses)
        return [t for t in self.tasks if t.status in wanted]

    def get(self, task_id: int) -> Optional[TaskRef]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None


class MockPaneStore:
    """In-memory PaneStore; set ``fail_writes`` to simulate a broken store."""

    def __init__(self) -> None:
        self.records: List[PaneRecord] = []
        self.fail_writes = False

    def create(self, record: PaneRecord) -> bool:
        if self.fail_writes:
            return False
        self.records.append(record)
        return True

    def list(self, task_id: int) -> List[PaneRecord]:
        return [r for r in self.records if r.task_id == task_id]

    def delete(self, task_id: int, pane_id: str) -> bool:
        before = len(self.records)
        self.records = [r for r in self.records if not (r.task_id == task_id and r.pane_id == pane_id)]
        return len(self.records) != before
