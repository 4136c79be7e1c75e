"""Composition root for an interactive traverse session.

Builds config, bookmark store, preview provider, and session, then hands
them to the main loop. Returns the directory the session ended in.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from . import config as config_mod
from .bookmarks import BookmarkStore
from .errors import SnapshotError
from .loop import run_main_loop
from .preview import SystemPreviewProvider
from .session import Session
from .snapshot import list_directory
from .terminal import TerminalController
from .theme import theme_for

LOGGER = logging.getLogger(__name__)


def run_app(
    start_dir: Path,
    style: str = "monokai",
    no_color: bool = False,
    config_path: Path | None = None,
    bookmarks_path: Path | None = None,
) -> Path:
    try:
        os.chdir(start_dir)
    except OSError as exc:
        raise SystemExit(f"Cannot open {start_dir}: {exc.strerror or exc}") from exc
    app_config = config_mod.load_config(config_path)
    try:
        list_directory(app_config.show_hidden, app_config.excluded_directories)
    except SnapshotError as exc:
        raise SystemExit(str(exc)) from exc
    bookmarks = BookmarkStore(bookmarks_path if bookmarks_path is not None else config_mod.BOOKMARKS_PATH)
    session = Session(app_config, bookmarks)
    preview = SystemPreviewProvider(style=style, no_color=no_color, show_hidden=app_config.show_hidden)
    terminal = TerminalController(sys.stdin.fileno(), sys.stdout.fileno())
    LOGGER.info("Starting in %s", session.current_dir)
    run_main_loop(session, preview, terminal, theme_for(no_color))
    LOGGER.info("Exiting in %s", session.current_dir)
    return session.current_dir
