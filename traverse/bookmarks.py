"""Persisted list of bookmarked directories.

One absolute path per line. Loaded lazily the first time the bookmark menu
opens, appended to on add, rewritten in full on delete.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .errors import BookmarkPersistError

LOGGER = logging.getLogger(__name__)


class BookmarkStore:
    def __init__(self, path: Path) -> None:
        self.path = path
        self.items: list[str] = []
        self.selected: int | None = None
        self.loaded = False

    def __len__(self) -> int:
        return len(self.items)

    def load(self) -> list[str]:
        """Merge the file's entries into memory, then sort and select the first.

        A missing or unreadable file contributes nothing.
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            text = ""
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.warning("Cannot read bookmarks from %s: %s", self.path, exc)
            text = ""
        for line in text.splitlines():
            entry = line.strip()
            if entry and entry not in self.items:
                self.items.append(entry)
        self.items.sort()
        self.selected = 0 if self.items else None
        self.loaded = True
        return self.items

    def ensure_loaded(self) -> None:
        if not self.loaded:
            self.load()

    def add(self, directory: Path | str) -> bool:
        """Bookmark ``directory``; returns ``False`` when it is already present.

        The in-memory list is updated before the file is touched, so a
        ``BookmarkPersistError`` leaves the bookmark visible for this session.
        """
        self.ensure_loaded()
        entry = str(directory)
        if entry in self.items:
            return False
        self.items.append(entry)
        if self.selected is None:
            self.selected = 0
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            prefix = "\n" if self._lacks_final_newline() else ""
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(prefix + entry + "\n")
        except OSError as exc:
            raise BookmarkPersistError(self.path, exc.strerror or str(exc)) from exc
        LOGGER.info("Bookmarked %s", entry)
        return True

    def delete(self, index: int) -> bool:
        """Remove the bookmark at ``index`` if it still names a directory.

        Bookmarks whose directory no longer exists are kept. The file is
        rewritten and fsync'd before returning.
        """
        if not 0 <= index < len(self.items):
            return False
        entry = self.items[index]
        if not os.path.isdir(entry):
            LOGGER.info("Keeping bookmark %s: not a directory", entry)
            return False
        del self.items[index]
        self._clamp_selection()
        self._rewrite()
        LOGGER.info("Removed bookmark %s", entry)
        return True

    def _lacks_final_newline(self) -> bool:
        try:
            with self.path.open("rb") as handle:
                if handle.seek(0, os.SEEK_END) == 0:
                    return False
                handle.seek(-1, os.SEEK_END)
                return handle.read(1) != b"\n"
        except FileNotFoundError:
            return False

    def _clamp_selection(self) -> None:
        if not self.items:
            self.selected = None
        elif self.selected is None:
            self.selected = 0
        else:
            self.selected = min(self.selected, len(self.items) - 1)

    def _rewrite(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as handle:
                handle.writelines(entry + "\n" for entry in self.items)
                handle.flush()
                os.fsync(handle.fileno())
        except OSError as exc:
            raise BookmarkPersistError(self.path, exc.strerror or str(exc)) from exc
