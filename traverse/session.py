"""Session state machine: focus, overlays, and key arbitration.

``Session.dispatch`` is the single entry point for key tokens. It decides
whether a key quits, edits text, moves an overlay cursor, moves a pane
cursor, or starts a command, and performs the resulting filesystem work
synchronously before returning.
"""

from __future__ import annotations

import enum
import logging
import os
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from . import fs_ops
from .bookmarks import BookmarkStore
from .config import AppConfig
from .errors import NavigationError, SnapshotError, TraverseError
from .keymap import KeyBinding, KeyRegistry
from .locator import locate_files
from .selection import OPERATIONS_MENU, BatchOperation, SelectionBuffer
from .snapshot import DirectorySnapshot, Entry, list_directory

LOGGER = logging.getLogger(__name__)

STATUS_MESSAGE_SECONDS = 4.0
MOVE_DOWN_KEYS = frozenset({"j", "DOWN"})
MOVE_UP_KEYS = frozenset({"k", "UP"})

Locate = Callable[[Path, str, bool, frozenset[str]], list[Path]]


class Pane(enum.Enum):
    FILES = "Files"
    DIRECTORIES = "Directories"
    CONTENT = "Contents"


class PendingCommand(enum.Enum):
    CREATE_FILE = "create file"
    CREATE_DIR = "create directory"
    RENAME_FILE = "rename file"
    RENAME_DIR = "rename directory"
    NAVIGATE = "navigate"
    FUZZY_SEARCH = "fuzzy search"
    SHOW_HELP = "help"
    SHOW_BOOKMARKS = "bookmarks"


@dataclass
class PopupOverlay:
    """Name prompt for create and rename; ``target`` is the entry being renamed."""

    command: PendingCommand
    text: str = ""
    target: str | None = None


@dataclass
class NavigatorOverlay:
    text: str = ""


@dataclass
class FuzzyFinderOverlay:
    text: str = ""
    results: list[Path] = field(default_factory=list)
    cursor: int | None = None


@dataclass
class HelpOverlay:
    pass


@dataclass
class BookmarkMenuOverlay:
    cursor: int | None = None


@dataclass
class OperationsMenuOverlay:
    cursor: int | None = None


Overlay = (
    PopupOverlay
    | NavigatorOverlay
    | FuzzyFinderOverlay
    | HelpOverlay
    | BookmarkMenuOverlay
    | OperationsMenuOverlay
)
TEXT_OVERLAYS = (PopupOverlay, NavigatorOverlay, FuzzyFinderOverlay)


@dataclass
class PaneList:
    """Entries of one pane plus its cursor; ``None`` means unfocused or empty."""

    items: list[Entry] = field(default_factory=list)
    cursor: int | None = None

    def selected(self) -> Entry | None:
        if self.cursor is None or not 0 <= self.cursor < len(self.items):
            return None
        return self.items[self.cursor]

    def focus(self) -> None:
        self.cursor = 0 if self.items else None

    def clamp(self) -> None:
        if self.cursor is None:
            return
        self.cursor = min(self.cursor, len(self.items) - 1) if self.items else None

    def move(self, delta: int) -> bool:
        if self.cursor is None or len(self.items) <= 1:
            return False
        self.cursor = (self.cursor + delta) % len(self.items)
        return True

    def select_name(self, name: str) -> bool:
        for index, entry in enumerate(self.items):
            if entry.display_name == name:
                self.cursor = index
                return True
        return False


def _wrap_cursor(cursor: int | None, delta: int, length: int) -> int | None:
    if length <= 0:
        return None
    if cursor is None:
        return 0
    return (cursor + delta) % length


def _is_printable(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


class Session:
    def __init__(
        self,
        config: AppConfig,
        bookmarks: BookmarkStore,
        selection: SelectionBuffer | None = None,
        locate: Locate = locate_files,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.bookmarks = bookmarks
        self.selection = selection if selection is not None else SelectionBuffer()
        self._locate = locate
        self._clock = clock

        self.focus = Pane.FILES
        self.overlay: Overlay | None = None
        self.files = PaneList()
        self.dirs = PaneList()
        self.current_dir = Path.cwd()
        self.status_message = ""
        self.status_is_error = False
        self.status_message_until = 0.0
        self.dirty = True

        self._commands = KeyRegistry().register_bindings(
            KeyBinding(("n",), self.begin_create, "new file/dir in focused pane"),
            KeyBinding(("r",), self.begin_rename, "rename selected"),
            KeyBinding(("CTRL_D",), self.trash_selected, "delete to trash"),
            KeyBinding(("c",), self.stage_selected, "stage for copy/move"),
            KeyBinding(("p",), self.open_operations_menu, "operations menu"),
            KeyBinding(("x",), self.extract_selected, "extract archive"),
            KeyBinding(("w",), self.open_fuzzy_finder, "fuzzy find files"),
            KeyBinding(("f",), self.open_navigator, "go to path"),
            KeyBinding(("b",), self.open_bookmarks, "bookmarks"),
            KeyBinding(("z",), self.bookmark_current_dir, "bookmark current dir"),
            KeyBinding(("?",), self.open_help, "help"),
        )

        self.refresh()
        self.files.focus()

    # Derived state

    @property
    def pending(self) -> PendingCommand | None:
        overlay = self.overlay
        if isinstance(overlay, PopupOverlay):
            return overlay.command
        if isinstance(overlay, NavigatorOverlay):
            return PendingCommand.NAVIGATE
        if isinstance(overlay, FuzzyFinderOverlay):
            return PendingCommand.FUZZY_SEARCH
        if isinstance(overlay, HelpOverlay):
            return PendingCommand.SHOW_HELP
        if isinstance(overlay, BookmarkMenuOverlay):
            return PendingCommand.SHOW_BOOKMARKS
        return None

    @property
    def input_active(self) -> bool:
        return isinstance(self.overlay, TEXT_OVERLAYS)

    @property
    def text(self) -> str:
        if isinstance(self.overlay, TEXT_OVERLAYS):
            return self.overlay.text
        return ""

    @property
    def blocked(self) -> bool:
        return self.overlay is not None

    @property
    def command_help(self) -> list[tuple[str, str]]:
        return self._commands.help_rows()

    def pane_list(self, pane: Pane) -> PaneList | None:
        if pane is Pane.FILES:
            return self.files
        if pane is Pane.DIRECTORIES:
            return self.dirs
        return None

    def focused_list(self) -> PaneList | None:
        return self.pane_list(self.focus)

    def selected_entry(self) -> Entry | None:
        pane = self.focused_list()
        return pane.selected() if pane is not None else None

    def selected_path(self) -> Path | None:
        """Path of the focused entry, used by the details and contents panes."""
        entry = self.selected_entry()
        if entry is None:
            return None
        if entry.is_parent:
            return self.current_dir.parent
        return self.current_dir / entry.path_token

    # Status line

    def notify(self, message: str, level: int = logging.INFO) -> None:
        LOGGER.log(level, "%s", message)
        self.status_message = message
        self.status_is_error = level >= logging.WARNING
        self.status_message_until = self._clock() + STATUS_MESSAGE_SECONDS
        self.dirty = True

    def report(self, exc: TraverseError) -> None:
        self.notify(str(exc), logging.WARNING)

    def expire_status(self) -> bool:
        if self.status_message and self._clock() >= self.status_message_until:
            self.status_message = ""
            self.status_is_error = False
            self.dirty = True
            return True
        return False

    # Listings

    def refresh(self) -> None:
        """Rebuild both listings and keep every cursor in range."""
        try:
            snapshot = list_directory(self.config.show_hidden, self.config.excluded_directories)
        except SnapshotError as exc:
            self.report(exc)
            snapshot = DirectorySnapshot()
        self.files.items = list(snapshot.files)
        self.dirs.items = list(snapshot.dirs)
        self.files.clamp()
        self.dirs.clamp()
        focused = self.focused_list()
        if focused is not None and focused.cursor is None:
            focused.focus()
        self.dirty = True

    def set_focus(self, pane: Pane) -> None:
        """Give ``pane`` the cursor and clear every sibling cursor."""
        self.focus = pane
        for candidate in (self.files, self.dirs):
            candidate.cursor = None
        focused = self.focused_list()
        if focused is not None:
            focused.focus()

    def change_directory(self, target: Path | str) -> Path:
        try:
            os.chdir(target)
            resolved = Path.cwd()
        except OSError as exc:
            raise NavigationError(str(target), exc.strerror or str(exc)) from exc
        LOGGER.debug("Changed directory to %s", resolved)
        self.current_dir = resolved
        return resolved

    # Dispatch

    def dispatch(self, key: str) -> bool:
        """Apply one key token; returns ``True`` when the browser should quit."""
        if not key:
            return False
        self.dirty = True
        if key == "CTRL_C":
            return True
        if key == "ESC" or (key == "q" and not self.input_active):
            if self.overlay is not None:
                self.close_overlay()
                return False
            return True
        if self.input_active and self._handle_text_key(key):
            return False
        if self._handle_overlay_key(key):
            return False
        if key == "ENTER":
            self._submit()
            return False
        if self.blocked:
            return False
        if self._handle_pane_key(key):
            return False
        self._commands.dispatch(key)
        return False

    def close_overlay(self) -> None:
        self.overlay = None

    def _handle_text_key(self, key: str) -> bool:
        overlay = self.overlay
        assert isinstance(overlay, TEXT_OVERLAYS)
        if _is_printable(key):
            overlay.text += key
        elif key == "BACKSPACE":
            overlay.text = overlay.text[:-1]
        else:
            return False
        if isinstance(overlay, FuzzyFinderOverlay):
            self._run_fuzzy_query(overlay)
        return True

    def _handle_overlay_key(self, key: str) -> bool:
        overlay = self.overlay
        if overlay is None:
            return False
        if key in {"CTRL_N", "CTRL_P"}:
            self._move_overlay_cursor(1 if key == "CTRL_N" else -1)
            return True
        if isinstance(overlay, (BookmarkMenuOverlay, OperationsMenuOverlay)):
            if key in MOVE_DOWN_KEYS or key in MOVE_UP_KEYS:
                self._move_overlay_cursor(1 if key in MOVE_DOWN_KEYS else -1)
                return True
        if isinstance(overlay, FuzzyFinderOverlay) and key in {"UP", "DOWN"}:
            self._move_overlay_cursor(1 if key == "DOWN" else -1)
            return True
        if isinstance(overlay, BookmarkMenuOverlay) and key == "CTRL_D":
            self.delete_bookmark()
            return True
        if isinstance(overlay, HelpOverlay) and key == "?":
            self.close_overlay()
            return True
        return False

    def _move_overlay_cursor(self, delta: int) -> None:
        overlay = self.overlay
        if isinstance(overlay, FuzzyFinderOverlay):
            overlay.cursor = _wrap_cursor(overlay.cursor, delta, len(overlay.results))
        elif isinstance(overlay, BookmarkMenuOverlay):
            overlay.cursor = _wrap_cursor(overlay.cursor, delta, len(self.bookmarks))
            self.bookmarks.selected = overlay.cursor
        elif isinstance(overlay, OperationsMenuOverlay):
            overlay.cursor = _wrap_cursor(overlay.cursor, delta, len(OPERATIONS_MENU))

    def _handle_pane_key(self, key: str) -> bool:
        if key in MOVE_DOWN_KEYS or key in MOVE_UP_KEYS:
            pane = self.focused_list()
            if pane is not None:
                pane.move(1 if key in MOVE_DOWN_KEYS else -1)
            return True
        if key == "1":
            self.set_focus(Pane.FILES)
            return True
        if key == "2":
            self.set_focus(Pane.DIRECTORIES)
            return True
        return False

    def _submit(self) -> None:
        overlay = self.overlay
        if isinstance(overlay, FuzzyFinderOverlay):
            self.open_fuzzy_result()
        elif isinstance(overlay, BookmarkMenuOverlay):
            self.open_selected_bookmark()
        elif isinstance(overlay, OperationsMenuOverlay):
            self.run_selected_operation()
        elif isinstance(overlay, (PopupOverlay, NavigatorOverlay)):
            self.submit_text()
        elif overlay is None and self.focus is Pane.DIRECTORIES:
            self.enter_selected_directory()

    # Command initiation

    def begin_create(self) -> None:
        if self.overlay is not None:
            return
        if self.focus is Pane.FILES:
            self.overlay = PopupOverlay(PendingCommand.CREATE_FILE)
        elif self.focus is Pane.DIRECTORIES:
            self.overlay = PopupOverlay(PendingCommand.CREATE_DIR)

    def begin_rename(self) -> None:
        if self.overlay is not None:
            return
        entry = self.selected_entry()
        if entry is None or entry.is_parent:
            return
        command = PendingCommand.RENAME_FILE if self.focus is Pane.FILES else PendingCommand.RENAME_DIR
        self.overlay = PopupOverlay(command, text=entry.display_name, target=entry.path_token)

    def trash_selected(self) -> None:
        entry = self.selected_entry()
        if entry is None or entry.is_parent:
            return
        try:
            fs_ops.trash_entry(self.current_dir / entry.path_token)
        except TraverseError as exc:
            self.report(exc)
            return
        self.refresh()
        self.notify(f"Moved {entry.display_name} to trash")

    def stage_selected(self) -> None:
        entry = self.selected_entry()
        if entry is None or entry.is_parent:
            return
        if self.selection.stage(self.current_dir / entry.path_token):
            self.notify(f"Staged {entry.display_name} ({len(self.selection)} staged)")

    def open_operations_menu(self) -> None:
        if self.overlay is not None or self.focused_list() is None:
            return
        self.overlay = OperationsMenuOverlay()

    def extract_selected(self) -> None:
        entry = self.selected_entry()
        if self.focus is not Pane.FILES or entry is None:
            return
        archive = self.current_dir / entry.path_token
        if not fs_ops.is_archive(archive):
            self.notify(f"Not an archive: {entry.display_name}", logging.WARNING)
            return
        try:
            names = fs_ops.extract_archive(archive, self.current_dir)
        except TraverseError as exc:
            self.report(exc)
            return
        self.refresh()
        self.notify(f"Extracted {len(names)} entries from {entry.display_name}")

    def open_fuzzy_finder(self) -> None:
        if self.overlay is None:
            self.overlay = FuzzyFinderOverlay()

    def open_navigator(self) -> None:
        if self.overlay is None:
            self.overlay = NavigatorOverlay()

    def open_bookmarks(self) -> None:
        if self.overlay is not None:
            return
        self.bookmarks.ensure_loaded()
        cursor = self.bookmarks.selected
        if cursor is None and len(self.bookmarks):
            cursor = 0
        self.overlay = BookmarkMenuOverlay(cursor=cursor)

    def bookmark_current_dir(self) -> None:
        try:
            added = self.bookmarks.add(self.current_dir)
        except TraverseError as exc:
            self.report(exc)
            return
        if added:
            self.notify(f"Bookmarked {self.current_dir}")
        else:
            self.notify(f"{self.current_dir} is already bookmarked")

    def open_help(self) -> None:
        if self.overlay is None:
            self.overlay = HelpOverlay()

    # Submission

    def submit_text(self) -> None:
        """Run the pending create, rename, or navigate command on the typed text."""
        overlay = self.overlay
        if not isinstance(overlay, (PopupOverlay, NavigatorOverlay)):
            return
        text = overlay.text
        command = self.pending
        self.close_overlay()
        try:
            if command is PendingCommand.CREATE_FILE:
                created = fs_ops.create_file(text, self.current_dir)
                self.refresh()
                self.files.select_name(created.name)
            elif command is PendingCommand.CREATE_DIR:
                created = fs_ops.create_directory(text, self.current_dir)
                self.refresh()
                self.dirs.select_name(created.name)
            elif command in {PendingCommand.RENAME_FILE, PendingCommand.RENAME_DIR}:
                assert isinstance(overlay, PopupOverlay) and overlay.target is not None
                renamed = fs_ops.rename_entry(self.current_dir / overlay.target, text)
                self.refresh()
                pane = self.files if command is PendingCommand.RENAME_FILE else self.dirs
                pane.select_name(renamed.name)
            elif command is PendingCommand.NAVIGATE:
                self.change_directory(os.path.expanduser(text.strip()))
                self.refresh()
                if self.focus is Pane.DIRECTORIES:
                    self.dirs.cursor = 0
        except TraverseError as exc:
            self.report(exc)
            self.refresh()

    def enter_selected_directory(self) -> None:
        entry = self.dirs.selected()
        if entry is None:
            return
        target = self.current_dir.parent if entry.is_parent else self.current_dir / entry.path_token
        try:
            self.change_directory(target)
        except NavigationError as exc:
            self.report(exc)
            return
        self.refresh()
        self.files.clamp()
        self.dirs.cursor = 0

    def open_fuzzy_result(self) -> None:
        overlay = self.overlay
        if not isinstance(overlay, FuzzyFinderOverlay) or overlay.cursor is None:
            return
        if not 0 <= overlay.cursor < len(overlay.results):
            return
        match = overlay.results[overlay.cursor]
        try:
            self.change_directory(match.parent)
        except NavigationError as exc:
            self.close_overlay()
            self.report(exc)
            return
        self.close_overlay()
        self.focus = Pane.FILES
        self.dirs.cursor = None
        self.refresh()
        if not self.files.select_name(match.name):
            self.files.focus()

    def open_selected_bookmark(self) -> None:
        overlay = self.overlay
        if not isinstance(overlay, BookmarkMenuOverlay) or overlay.cursor is None:
            return
        if not 0 <= overlay.cursor < len(self.bookmarks):
            return
        target = self.bookmarks.items[overlay.cursor]
        if not os.path.isdir(target):
            self.notify(f"Bookmark {target} is not a directory", logging.WARNING)
            return
        try:
            self.change_directory(target)
        except NavigationError as exc:
            self.report(exc)
            return
        self.close_overlay()
        self.refresh()
        self.set_focus(Pane.FILES)

    def delete_bookmark(self) -> None:
        overlay = self.overlay
        if not isinstance(overlay, BookmarkMenuOverlay) or overlay.cursor is None:
            return
        target = self.bookmarks.items[overlay.cursor] if overlay.cursor < len(self.bookmarks) else None
        try:
            removed = self.bookmarks.delete(overlay.cursor)
        except TraverseError as exc:
            self.report(exc)
            removed = True
        else:
            if removed:
                self.notify(f"Removed bookmark {target}")
            else:
                self.notify(f"Bookmark {target} no longer exists; kept", logging.WARNING)
        if removed:
            overlay.cursor = self.bookmarks.selected

    def run_selected_operation(self) -> None:
        overlay = self.overlay
        if not isinstance(overlay, OperationsMenuOverlay):
            return
        self.close_overlay()
        if overlay.cursor is None:
            return
        operation = OPERATIONS_MENU[overlay.cursor]
        try:
            result = self.selection.execute(operation, self.current_dir)
        except TraverseError as exc:
            self.report(exc)
            return
        if operation is not BatchOperation.CLEAR:
            self.refresh()
        level = logging.WARNING if result.failed else logging.INFO
        self.notify(result.summary(), level)

    # Fuzzy finder

    def _run_fuzzy_query(self, overlay: FuzzyFinderOverlay) -> None:
        overlay.results = self._locate(
            self.current_dir,
            overlay.text,
            self.config.show_hidden,
            self.config.excluded_directories,
        )
        overlay.cursor = 0 if overlay.results else None

