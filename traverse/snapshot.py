"""Directory listing for the Files and Directories panes.

Every call rebuilds both lists from one ``os.scandir`` pass; nothing is
patched in place.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .errors import SnapshotError

LOGGER = logging.getLogger(__name__)

PARENT_TOKEN = "../"
# Swap files at the filesystem root are never listed.
SKIPPED_FILE_NAMES = frozenset({"swapfile"})


@dataclass(frozen=True)
class Entry:
    """One listed child; ``path_token`` is relative to the working directory."""

    display_name: str
    path_token: str

    @classmethod
    def named(cls, name: str) -> Entry:
        return cls(display_name=name, path_token=name)

    @property
    def is_parent(self) -> bool:
        return self.path_token == PARENT_TOKEN


PARENT_ENTRY = Entry.named(PARENT_TOKEN)


@dataclass(frozen=True)
class DirectorySnapshot:
    files: tuple[Entry, ...] = ()
    dirs: tuple[Entry, ...] = field(default=(PARENT_ENTRY,))


def sort_key(name: str) -> tuple[bool, str]:
    """Dotfiles after everything else, plain codepoint order within a group."""
    return (name.startswith("."), name)


def list_directory(
    show_hidden: bool,
    exclusions: frozenset[str] | set[str],
    directory: Path | None = None,
) -> DirectorySnapshot:
    """Partition ``directory`` (default: cwd) into sorted file and dir entries.

    Symlinks are classified by their target. Children that disappear or
    cannot be stat'ed mid-scan are skipped. ``exclusions`` applies to
    directory names only; dotfiles of both kinds are hidden unless
    ``show_hidden`` is set.
    """
    target = directory if directory is not None else Path(".")
    files: list[str] = []
    dirs: list[str] = []
    try:
        with os.scandir(target) as entries:
            for child in entries:
                name = child.name
                if not show_hidden and name.startswith("."):
                    continue
                try:
                    if child.is_dir():
                        if name not in exclusions:
                            dirs.append(name)
                    elif child.is_file():
                        if name not in SKIPPED_FILE_NAMES:
                            files.append(name)
                except OSError as exc:
                    LOGGER.debug("Skipping %s: %s", name, exc)
    except OSError as exc:
        raise SnapshotError(target, exc.strerror or str(exc)) from exc

    files.sort(key=sort_key)
    dirs.sort(key=sort_key)
    return DirectorySnapshot(
        files=tuple(Entry.named(name) for name in files),
        dirs=(PARENT_ENTRY, *(Entry.named(name) for name in dirs)),
    )
