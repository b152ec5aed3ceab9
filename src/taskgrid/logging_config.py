"""
Centralized logging configuration for taskgrid.

All components log through children of the ``taskgrid`` logger so a single
setup call controls level and destination. The TUI owns the terminal while
running, so it logs to a file only; the CLI logs warnings to stderr via Rich.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler

from .settings import get_log_dir

ROOT_LOGGER_NAME = "taskgrid"
DEFAULT_LOG_DIR = get_log_dir()
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a logger namespaced under ``taskgrid``."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    console: bool = True,
    rich_console: bool = True,
) -> None:
    """Configure the root ``taskgrid`` logger.

    Existing handlers are removed so repeated calls don't duplicate output.

    Args:
        level: Logging level for the taskgrid logger
        log_file: Optional file to append log records to
        console: Whether to log to stderr
        rich_console: Use Rich formatting for the console handler
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(level)
    logger.propagate = False

    if console:
        if rich_console:
            handler: logging.Handler = RichHandler(
                console=Console(stderr=True),
                show_path=False,
                rich_tracebacks=True,
            )
            handler.setFormatter(logging.Formatter("%(message)s"))
        else:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)


def setup_tui_logging(log_file: Optional[Path] = None, level: int = logging.DEBUG) -> logging.Logger:
    """File-only logging for the TUI process."""
    setup_logging(
        level=level,
        log_file=log_file or DEFAULT_LOG_DIR / "tui.log",
        console=False,
    )
    return get_logger("tui")


def setup_cli_logging(verbose: bool = False) -> logging.Logger:
    """Console logging for one-shot CLI commands."""
    setup_logging(level=logging.DEBUG if verbose else logging.WARNING, console=True)
    return get_logger("cli")


class StructuredLogger:
    """Logger wrapper that appends ``key=value`` context to every message.

    Example:
        log = get_structured_logger("acquisition").with_context(task_id=42)
        log.warning("join failed", slot=3)
        # -> "join failed | task_id=42 slot=3"
    """

    def __init__(self, logger: logging.Logger, context: Optional[Dict[str, Any]] = None):
        self._logger = logger
        self._context: Dict[str, Any] = dict(context or {})

    def with_context(self, **kwargs: Any) -> "StructuredLogger":
        merged = dict(self._context)
        merged.update(kwargs)
        return StructuredLogger(self._logger, merged)

    def _format(self, message: str, kwargs: Dict[str, Any]) -> str:
        fields = dict(self._context)
        fields.update(kwargs)
        if not fields:
            return message
        rendered = " ".join(f"{k}={v}" for k, v in fields.items())
        return f"{message} | {rendered}"

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(self._format(message, kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(self._format(message, kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(self._format(message, kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        self._logger.error(self._format(message, kwargs))


def get_structured_logger(name: str) -> StructuredLogger:
    return StructuredLogger(get_logger(name))
