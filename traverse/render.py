"""Full-frame painter for the browser.

Panes and overlays are drawn onto a cell ``Canvas`` and flushed as one
string, so overlays can cover panes without tracking what lies beneath.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .ansi import ANSI_ESCAPE_RE, char_display_width
from .help import build_help_lines
from .preview import CONTENT_PREVIEW_LINES, PreviewProvider, disk_usage_label
from .selection import OPERATIONS_MENU
from .session import (
    BookmarkMenuOverlay,
    FuzzyFinderOverlay,
    HelpOverlay,
    NavigatorOverlay,
    OperationsMenuOverlay,
    Pane,
    PaneList,
    PendingCommand,
    PopupOverlay,
    Session,
)
from .theme import DEFAULT_THEME, UITheme

MIN_WIDTH = 40
MIN_HEIGHT = 12
BOTTOM_ROW_HEIGHT = 6
PROMPT_CURSOR = "_"
POPUP_TITLES: dict[PendingCommand, str] = {
    PendingCommand.CREATE_FILE: "New file name",
    PendingCommand.CREATE_DIR: "New directory name",
    PendingCommand.RENAME_FILE: "Rename file",
    PendingCommand.RENAME_DIR: "Rename directory",
}


def abbreviate_path(path: Path | str) -> str:
    """Keep only the last three components of paths deeper than four."""
    parts = Path(path).parts
    if len(parts) <= 4:
        return str(path)
    return ".../" + "/".join(parts[-3:])


def _is_reset(sequence: str) -> bool:
    if not sequence.endswith("m"):
        return False
    params = sequence[2:-1]
    return params in {"", "0", "00"} or params.endswith(";00") or params.endswith(";0")


@dataclass
class Cell:
    char: str = " "
    style: str = ""


class Canvas:
    """Grid of styled cells; wide characters occupy a cell plus an empty one."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.rows = [[Cell() for _ in range(width)] for _ in range(height)]

    def _set(self, x: int, y: int, char: str, style: str) -> None:
        if 0 <= y < self.height and 0 <= x < self.width:
            cell = self.rows[y][x]
            cell.char = char
            cell.style = style

    def fill(self, x: int, y: int, width: int, height: int, style: str = "") -> None:
        for row in range(y, y + height):
            for col in range(x, x + width):
                self._set(col, row, " ", style)

    def text(self, x: int, y: int, text: str, max_cols: int, style: str = "", pad: bool = False) -> None:
        """Write ``text`` (which may carry ANSI SGR codes) clipped to ``max_cols``.

        ``style`` is the base style; embedded SGR codes layer on top of it
        until the next reset.
        """
        col = 0
        current = style
        i = 0
        while i < len(text) and col < max_cols:
            if text[i] == "\x1b":
                match = ANSI_ESCAPE_RE.match(text, i)
                if match:
                    sequence = match.group(0)
                    if sequence.endswith("m"):
                        current = style if _is_reset(sequence) else current + sequence
                    i = match.end()
                    continue
            ch = text[i]
            i += 1
            if ch in "\r\n":
                continue
            width = char_display_width(ch, col)
            if col + width > max_cols:
                break
            if ch == "\t":
                for offset in range(width):
                    self._set(x + col + offset, y, " ", current)
            else:
                self._set(x + col, y, ch, current)
                for offset in range(1, width):
                    self._set(x + col + offset, y, "", current)
            col += width
        if pad:
            for offset in range(col, max_cols):
                self._set(x + offset, y, " ", style)

    def box(self, x: int, y: int, width: int, height: int, title: str = "", style: str = "") -> None:
        if width < 2 or height < 2:
            return
        self.fill(x, y, width, height)
        horizontal = "─" * (width - 2)
        self.text(x, y, "┌" + horizontal + "┐", width, style)
        for row in range(y + 1, y + height - 1):
            self._set(x, row, "│", style)
            self._set(x + width - 1, row, "│", style)
        self.text(x, y + height - 1, "└" + horizontal + "┘", width, style)
        if title:
            self.text(x + 2, y, f" {title} ", width - 4, style)

    def render(self, reset: str) -> str:
        out: list[str] = []
        for index, row in enumerate(self.rows):
            current = ""
            for cell in row:
                if cell.style != current:
                    out.append(reset + cell.style)
                    current = cell.style
                out.append(cell.char)
            if current:
                out.append(reset)
            if index < self.height - 1:
                out.append("\r\n")
        return "".join(out)


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def inner_width(self) -> int:
        return max(0, self.width - 2)

    @property
    def inner_height(self) -> int:
        return max(0, self.height - 2)


@dataclass(frozen=True)
class Layout:
    contents: Rect
    files: Rect
    dirs: Rect
    details: Rect
    current_dir: Rect
    disk_usage: Rect
    status_row: int


def compute_layout(width: int, height: int) -> Layout:
    """Contents on the left, Files over Directories on the right, info row below."""
    body_height = height - 1
    bottom = BOTTOM_ROW_HEIGHT if body_height >= 3 * BOTTOM_ROW_HEIGHT else 3
    top = body_height - bottom
    left = width // 2
    right = width - left
    files_height = top // 2
    third = width // 3
    return Layout(
        contents=Rect(0, 0, left, top),
        files=Rect(left, 0, right, files_height),
        dirs=Rect(left, files_height, right, top - files_height),
        details=Rect(0, top, third, bottom),
        current_dir=Rect(third, top, third, bottom),
        disk_usage=Rect(2 * third, top, width - 2 * third, bottom),
        status_row=height - 1,
    )


def _visible_window(cursor: int | None, total: int, rows: int) -> int:
    if rows <= 0 or cursor is None or cursor < rows:
        return 0
    return min(cursor - rows + 1, total - rows)


def _draw_lines(canvas: Canvas, rect: Rect, lines: list[str], style: str = "") -> None:
    for offset, line in enumerate(lines[: rect.inner_height]):
        canvas.text(rect.x + 1, rect.y + 1 + offset, line, rect.inner_width, style)


def _draw_list(
    canvas: Canvas,
    rect: Rect,
    labels: list[str],
    cursor: int | None,
    theme: UITheme,
    style: str = "",
) -> None:
    rows = rect.inner_height
    start = _visible_window(cursor, len(labels), rows)
    for offset, label in enumerate(labels[start : start + rows]):
        index = start + offset
        row_style = theme.reverse if index == cursor else style
        canvas.text(rect.x + 1, rect.y + 1 + offset, label, rect.inner_width, row_style, pad=index == cursor)


def _draw_pane(canvas: Canvas, rect: Rect, session: Session, pane: Pane, theme: UITheme) -> None:
    focused = session.focus is pane and session.overlay is None
    canvas.box(rect.x, rect.y, rect.width, rect.height, pane.value, theme.border_focused if focused else theme.border)
    pane_list: PaneList | None = session.pane_list(pane)
    if pane_list is None:
        return
    labels = [entry.display_name for entry in pane_list.items]
    style = theme.file if pane is Pane.FILES else theme.directory
    _draw_list(canvas, rect, labels, pane_list.cursor, theme, style)


def _centered(width: int, height: int, box_width: int, box_height: int) -> Rect:
    box_width = min(width, box_width)
    box_height = min(height, box_height)
    return Rect((width - box_width) // 2, (height - box_height) // 2, box_width, box_height)


def _display_result(path: Path, root: Path) -> str:
    try:
        return os.fspath(path.relative_to(root))
    except ValueError:
        return os.fspath(path)


def _draw_prompt(canvas: Canvas, rect: Rect, title: str, text: str, theme: UITheme) -> None:
    canvas.box(rect.x, rect.y, rect.width, rect.height, title, theme.overlay_border)
    canvas.text(rect.x + 1, rect.y + 1, text + PROMPT_CURSOR, rect.inner_width)


def _draw_overlay(canvas: Canvas, session: Session, theme: UITheme) -> None:
    overlay = session.overlay
    width, height = canvas.width, canvas.height - 1
    if isinstance(overlay, PopupOverlay):
        rect = _centered(width, height, max(30, width // 2), 3)
        _draw_prompt(canvas, rect, POPUP_TITLES.get(overlay.command, "Name"), overlay.text, theme)
    elif isinstance(overlay, NavigatorOverlay):
        rect = _centered(width, height, max(30, (width * 3) // 5), 3)
        _draw_prompt(canvas, rect, "Go to path", overlay.text, theme)
    elif isinstance(overlay, FuzzyFinderOverlay):
        rect = _centered(width, height, max(30, (width * 3) // 4), max(8, (height * 3) // 4))
        _draw_prompt(canvas, Rect(rect.x, rect.y, rect.width, 3), "Find file", overlay.text, theme)
        results = Rect(rect.x, rect.y + 3, rect.width, rect.height - 3)
        count = f"{len(overlay.results)} results" if overlay.text else "type to search"
        canvas.box(results.x, results.y, results.width, results.height, count, theme.overlay_border)
        labels = [_display_result(path, session.current_dir) for path in overlay.results]
        _draw_list(canvas, results, labels, overlay.cursor, theme)
    elif isinstance(overlay, HelpOverlay):
        lines = build_help_lines(session.command_help, theme)
        rect = _centered(width, height, max(40, width // 2), len(lines) + 2)
        canvas.box(rect.x, rect.y, rect.width, rect.height, "Bindings", theme.overlay_border)
        _draw_lines(canvas, rect, lines)
    elif isinstance(overlay, BookmarkMenuOverlay):
        rect = _centered(width, height, max(40, (width * 3) // 5), max(6, height // 2))
        canvas.box(rect.x, rect.y, rect.width, rect.height, "Bookmarks", theme.overlay_border)
        if session.bookmarks.items:
            labels = [abbreviate_path(item) for item in session.bookmarks.items]
            _draw_list(canvas, rect, labels, overlay.cursor, theme)
        else:
            _draw_lines(canvas, rect, ["No bookmarks yet, press z to add one"], theme.dim)
    elif isinstance(overlay, OperationsMenuOverlay):
        rect = _centered(width, height, max(50, (width * 3) // 4), max(8, height // 2))
        menu_width = max(18, rect.width // 3)
        menu = Rect(rect.x, rect.y, menu_width, rect.height)
        staged = Rect(rect.x + menu_width, rect.y, rect.width - menu_width, rect.height)
        canvas.box(menu.x, menu.y, menu.width, menu.height, "Operations", theme.overlay_border)
        _draw_list(canvas, menu, [operation.label for operation in OPERATIONS_MENU], overlay.cursor, theme)
        canvas.box(staged.x, staged.y, staged.width, staged.height, "Currently Selected Files/Dirs", theme.overlay_border)
        if len(session.selection):
            _draw_lines(canvas, staged, [abbreviate_path(path) for path in session.selection])
        else:
            _draw_lines(canvas, staged, ["No files staged for operation"], theme.dim)


def status_text(session: Session) -> str:
    if session.status_message:
        return session.status_message
    staged = len(session.selection)
    staged_label = f"{staged} staged | " if staged else ""
    return f"{staged_label}? help | q quit"


def render_frame(
    session: Session,
    preview: PreviewProvider,
    width: int,
    height: int,
    theme: UITheme = DEFAULT_THEME,
) -> str:
    """Paint the whole screen for ``session`` and return it as one string."""
    width = max(MIN_WIDTH, width)
    height = max(MIN_HEIGHT, height)
    canvas = Canvas(width, height)
    layout = compute_layout(width, height)

    selected = session.selected_path()
    contents = layout.contents
    canvas.box(contents.x, contents.y, contents.width, contents.height, Pane.CONTENT.value, theme.border)
    if selected is not None:
        _draw_lines(canvas, contents, preview.contents(selected, CONTENT_PREVIEW_LINES))
    _draw_pane(canvas, layout.files, session, Pane.FILES, theme)
    _draw_pane(canvas, layout.dirs, session, Pane.DIRECTORIES, theme)

    details = layout.details
    canvas.box(details.x, details.y, details.width, details.height, "Details", theme.border)
    if selected is not None:
        _draw_lines(canvas, details, preview.details(selected))
    current = layout.current_dir
    canvas.box(current.x, current.y, current.width, current.height, "Current Directory", theme.border)
    _draw_lines(canvas, current, [abbreviate_path(session.current_dir)], theme.title)
    usage = layout.disk_usage
    canvas.box(usage.x, usage.y, usage.width, usage.height, "Disk Usage", theme.border)
    _draw_lines(canvas, usage, [disk_usage_label(session.current_dir)])

    if session.overlay is not None:
        _draw_overlay(canvas, session, theme)

    status_style = theme.status_error if session.status_is_error else theme.status
    canvas.text(0, layout.status_row, status_text(session), width, status_style, pad=True)
    return "\033[H" + canvas.render(theme.reset)
