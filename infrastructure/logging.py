"""Logging initialization utilities using loguru."""

from __future__ import annotations

import os
from pathlib import Path
import sys

from loguru import logger


def get_log_directory() -> str:
    """Get the main log directory path."""
    if sys.platform == "win32":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
    else:
        base = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    return str(base / "PhotoWork" / "logs")


def init_logging(log_dir: str | None = None, level: str = "INFO", console: bool = False) -> None:
    """Initialize rotating file logging under the given directory.

    With `console` set, warnings and errors are echoed to stderr as well.
    """
    if log_dir is None:
        log_dir = get_log_directory()
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(
        str(log_path / "app_{time:YYYYMMDD}.log"),
        rotation="10 MB",
        retention="10 days",
        compression="zip",
        enqueue=True,
        backtrace=False,
        diagnose=False,
        level=level,
    )
    if console:
        logger.add(sys.stderr, level="WARNING", format="{level}: {message}")
