"""UI palettes for pane chrome, overlays, and the status line.

Syntax highlighting style for previews is a separate Pygments setting.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    reset: str
    reverse: str
    border: str
    border_focused: str
    title: str
    directory: str
    file: str
    dim: str
    status: str
    status_error: str
    overlay_border: str
    help_heading: str
    help_key: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    reverse="\033[7m",
    border="\033[2m",
    border_focused="\033[38;5;81m",
    title="\033[1m",
    directory="\033[1;34m",
    file="\033[38;5;252m",
    dim="\033[2;38;5;250m",
    status="\033[38;5;229m",
    status_error="\033[38;5;203m",
    overlay_border="\033[38;5;214m",
    help_heading="\033[1;38;5;81m",
    help_key="\033[38;5;229m",
)

MONO_THEME = UITheme(
    name="mono",
    reset="\033[0m",
    reverse="\033[7m",
    border="",
    border_focused="\033[1m",
    title="\033[1m",
    directory="",
    file="",
    dim="",
    status="",
    status_error="\033[1m",
    overlay_border="\033[1m",
    help_heading="\033[1m",
    help_key="",
)


def theme_for(no_color: bool) -> UITheme:
    return MONO_THEME if no_color else DEFAULT_THEME
