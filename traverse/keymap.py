"""Key-binding registry for command initiation.

Bindings carry a short label so the help overlay is generated from the same
table the dispatcher uses.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

KeyHandler = Callable[[], bool | None]


@dataclass(frozen=True)
class KeyBinding:
    """Mapping from one or more key tokens to a single action callback."""

    combos: tuple[str, ...]
    handler: KeyHandler
    label: str = ""


KEY_DISPLAY_NAMES: dict[str, str] = {
    "CTRL_C": "Ctrl+C",
    "CTRL_D": "Ctrl+D",
    "CTRL_N": "Ctrl+N",
    "CTRL_P": "Ctrl+P",
    "ENTER": "Enter",
    "ESC": "Esc",
    "UP": "Up",
    "DOWN": "Down",
    "BACKSPACE": "Backspace",
}


def display_key(token: str) -> str:
    return KEY_DISPLAY_NAMES.get(token, token)


class KeyRegistry:
    """Exact-match dispatch table that remembers registration order."""

    def __init__(self) -> None:
        self._handlers: dict[str, KeyHandler] = {}
        self._bindings: list[KeyBinding] = []

    def register(self, binding: KeyBinding) -> KeyRegistry:
        """Register one binding, overwriting existing handlers for same combos."""
        for combo in binding.combos:
            self._handlers[combo] = binding.handler
        self._bindings.append(binding)
        return self

    def register_bindings(self, *bindings: KeyBinding) -> KeyRegistry:
        for binding in bindings:
            self.register(binding)
        return self

    def dispatch(self, key: str) -> bool | None:
        """Invoke bound handler for ``key``; ``None`` means nothing was bound."""
        handler = self._handlers.get(key)
        if handler is None:
            return None
        return handler()

    def help_rows(self) -> list[tuple[str, str]]:
        return [
            ("/".join(display_key(combo) for combo in binding.combos), binding.label)
            for binding in self._bindings
            if binding.label
        ]
