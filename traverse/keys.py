"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens.
A lone Esc resolves after a short wait without swallowing the next key.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

CONTROL_KEYS: dict[bytes, str] = {
    b"\x03": "CTRL_C",
    b"\x04": "CTRL_D",
    b"\x0e": "CTRL_N",
    b"\x10": "CTRL_P",
    b"\t": "TAB",
    b"\r": "ENTER",
    b"\n": "ENTER",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
}
ARROW_KEYS: dict[bytes, str] = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def _read_utf8_char(fd: int, lead: bytes) -> str:
    data = lead
    for _ in range(_utf8_length(lead[0]) - 1):
        nxt = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if nxt is None:
            break
        data += nxt
    return data.decode("utf-8", errors="replace")


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Return the next key token, or ``""`` when ``timeout_ms`` elapses first."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    token = CONTROL_KEYS.get(ch)
    if token is not None:
        return token
    if ch != b"\x1b":
        return _read_utf8_char(fd, ch)

    # Escape / arrow key sequences.
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq not in {b"[", b"O"}:
        _PENDING_BYTES.append(seq)
        return "ESC"
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    arrow = ARROW_KEYS.get(seq)
    if arrow is not None:
        return arrow
    # Drain the rest of an unrecognized CSI sequence (e.g. "3~" for Delete).
    while seq is not None and not (0x40 <= seq[0] <= 0x7E):
        seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    return "UNKNOWN"
