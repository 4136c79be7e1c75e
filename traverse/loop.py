"""Main interactive event loop for the terminal UI.

Alternates between painting the session and blocking for one key. The
tick timeout only drives status-message expiry and resize redraws.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .keys import read_key
from .preview import PreviewProvider
from .render import render_frame
from .session import Session
from .terminal import TerminalController
from .theme import DEFAULT_THEME, UITheme

TICK_TIMEOUT_MS = 250


@dataclass(frozen=True)
class LoopIO:
    """Injected terminal operations used by ``run_main_loop``."""

    read_key: Callable[[int], str]
    size: Callable[[], tuple[int, int]]
    write: Callable[[str], None]


def terminal_io(terminal: TerminalController) -> LoopIO:
    return LoopIO(
        read_key=lambda timeout_ms: read_key(terminal.stdin_fd, timeout_ms),
        size=terminal.size,
        write=terminal.write,
    )


def run_event_cycle(
    session: Session,
    preview: PreviewProvider,
    io: LoopIO,
    theme: UITheme = DEFAULT_THEME,
) -> None:
    """Paint and dispatch until a key asks to quit."""
    last_size: tuple[int, int] | None = None
    while True:
        session.expire_status()
        size = io.size()
        if session.dirty or size != last_size:
            width, height = size
            io.write(render_frame(session, preview, width, height, theme))
            session.dirty = False
            last_size = size
        key = io.read_key(TICK_TIMEOUT_MS)
        if session.dispatch(key):
            return


def run_main_loop(
    session: Session,
    preview: PreviewProvider,
    terminal: TerminalController,
    theme: UITheme = DEFAULT_THEME,
) -> None:
    with terminal.raw_mode():
        terminal.write("\033[H\033[J")
        run_event_cycle(session, preview, terminal_io(terminal), theme)
