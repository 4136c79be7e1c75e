"""Text loading, sanitization, and Pygments highlighting for previews.

Control bytes are neutralized before highlighting so previewed files cannot
move the cursor or ring the bell.
"""

from __future__ import annotations

import re
from pathlib import Path

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

DEFAULT_STYLE = "monokai"
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_FORMATTERS: dict[str, TerminalFormatter] = {}


def decode_text(data: bytes) -> str:
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    return data.decode("utf-8", errors="replace")


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def normalize_style(style: str) -> str:
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return DEFAULT_STYLE
    return style


def _formatter_for_style(style: str) -> TerminalFormatter:
    formatter = _FORMATTERS.get(style)
    if formatter is None:
        formatter = TerminalFormatter(style=style)
        _FORMATTERS[style] = formatter
    return formatter


def colorize_source(source: str, path: Path, style: str = DEFAULT_STYLE) -> str:
    """Highlight ``source`` with the lexer Pygments picks for ``path``.

    Unknown file types use the plain text lexer.
    """
    source = sanitize_terminal_text(source)
    formatter = _formatter_for_style(normalize_style(style))
    try:
        lexer = get_lexer_for_filename(path.name, source)
    except ClassNotFound:
        lexer = TextLexer()
    return highlight(source, lexer, formatter)
