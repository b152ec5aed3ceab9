"""
Dependency checking for external tools.

taskgrid drives tmux directly, so tmux must be installed and new enough for
percentage pane sizes and pane border titles. The tiled view must itself be
running inside a tmux pane.
"""

import os
import re
import shutil
import subprocess
from typing import Optional, Tuple

from .exceptions import TmuxNotFoundError

# split-window/resize-pane -l with a percentage needs tmux 3.1
MIN_TMUX_VERSION = (3, 1)

_VERSION_RE = re.compile(r"(\d+)\.(\d+)")


def find_executable(name: str) -> Optional[str]:
    return shutil.which(name)


def parse_tmux_version(version: Optional[str]) -> Optional[Tuple[int, int]]:
    """(major, minor) from `tmux -V` output such as "tmux 3.3a" or "tmux next-3.5"."""
    if not version:
        return None
    match = _VERSION_RE.search(version)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def tmux_supports_grid(version: Optional[str]) -> bool:
    """False only for a tmux known to be older than MIN_TMUX_VERSION."""
    parsed = parse_tmux_version(version)
    return parsed is None or parsed >= MIN_TMUX_VERSION


def check_tmux() -> Tuple[bool, Optional[str], Optional[str]]:
    """Look up tmux and ask it for its version.

    Returns:
        Tuple of (is_available, path, version). version is None when tmux
        exists but `tmux -V` failed.
    """
    path = find_executable("tmux")
    if not path:
        return False, None, None

    try:
        result = subprocess.run([path, "-V"], capture_output=True, text=True, timeout=5)
    except (subprocess.SubprocessError, OSError):
        return True, path, None
    if result.returncode != 0:
        return True, path, None
    return True, path, result.stdout.strip()


def require_tmux() -> str:
    """Path to a usable tmux.

    Raises:
        TmuxNotFoundError: tmux is missing or older than MIN_TMUX_VERSION
    """
    available, path, version = check_tmux()
    if not available:
        raise TmuxNotFoundError(
            "tmux is required but not found. "
            "Install it with: brew install tmux (macOS) or apt install tmux (Linux)"
        )
    if not tmux_supports_grid(version):
        wanted = ".".join(str(n) for n in MIN_TMUX_VERSION)
        raise TmuxNotFoundError(f"{version} is too old; taskgrid needs tmux {wanted} or newer")
    return path


def in_tmux() -> bool:
    """True when this process runs inside a tmux client."""
    return bool(os.environ.get("TMUX"))
