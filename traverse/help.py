"""Help overlay content.

Command rows come from the session's key registry; navigation and overlay
rows are fixed because they are resolved before command dispatch.
"""

from __future__ import annotations

from .theme import UITheme

NAVIGATION_ROWS: tuple[tuple[str, str], ...] = (
    ("1/2", "focus Files/Directories"),
    ("j/k, Up/Down", "move in focused pane or menu"),
    ("Enter", "open directory / confirm"),
    ("Esc", "close overlay, or quit"),
    ("q", "quit (unless typing)"),
    ("Ctrl+C", "quit"),
)

OVERLAY_ROWS: tuple[tuple[str, str], ...] = (
    ("Ctrl+N/Ctrl+P", "next/previous result"),
    ("Ctrl+D", "delete bookmark (in bookmarks)"),
    ("Backspace", "delete typed character"),
    ("?", "close help"),
)


def _section(title: str, rows, theme: UITheme) -> list[str]:
    lines = [f"{theme.help_heading}{title}{theme.reset}"]
    key_width = max((len(key) for key, _ in rows), default=0)
    for key, label in rows:
        lines.append(f"  {theme.help_key}{key.ljust(key_width)}{theme.reset}  {label}")
    return lines


def build_help_lines(command_rows: list[tuple[str, str]], theme: UITheme) -> list[str]:
    lines = _section("NAVIGATION", NAVIGATION_ROWS, theme)
    lines.append("")
    lines.extend(_section("COMMANDS", command_rows, theme))
    lines.append("")
    lines.extend(_section("IN OVERLAYS", OVERLAY_ROWS, theme))
    return lines
