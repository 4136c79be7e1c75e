"""Logging setup for the interactive session.

The terminal is in raw mode while the browser runs, so records go to a
file instead of stderr.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEBUG_ENV_VAR = "TRAVERSE_DEBUG"


def resolve_log_level(verbose: bool) -> int:
    if verbose or os.environ.get(DEBUG_ENV_VAR, "").strip() not in {"", "0"}:
        return logging.DEBUG
    return logging.WARNING


def configure_logging(log_path: Path, verbose: bool = False) -> Path | None:
    """Route package logging into ``log_path``.

    Returns the path in use, or ``None`` when the log directory cannot be
    created, in which case records are discarded.
    """
    level = resolve_log_level(verbose)
    resolved: Path | None = log_path
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()
        resolved = None
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[handler], force=True)
    return resolved
