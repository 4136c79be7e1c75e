from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path

from traverse.bookmarks import BookmarkStore
from traverse.config import AppConfig
from traverse.keymap import KeyBinding, KeyRegistry
from traverse.loop import TICK_TIMEOUT_MS, LoopIO, run_event_cycle
from traverse.session import Session
from traverse.theme import MONO_THEME


class StubPreview:
    def details(self, path: Path) -> list[str]:
        return []

    def contents(self, path: Path, max_lines: int = 30) -> list[str]:
        return []


class EventCycleTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self._previous_cwd = os.getcwd()
        os.chdir(self._tmp.name)
        Path("a.txt").write_text("", encoding="utf-8")
        Path("b.txt").write_text("", encoding="utf-8")
        self.session = Session(AppConfig(), BookmarkStore(Path(self._tmp.name) / ".bookmarks"))

    def tearDown(self) -> None:
        os.chdir(self._previous_cwd)
        self._tmp.cleanup()

    def test_redraws_only_after_changes_and_stops_on_quit(self) -> None:
        keys = iter(["", "j", "", "q"])
        timeouts: list[int] = []
        frames: list[str] = []

        def read_key(timeout_ms: int) -> str:
            timeouts.append(timeout_ms)
            return next(keys)

        io = LoopIO(read_key=read_key, size=lambda: (80, 24), write=frames.append)
        run_event_cycle(self.session, StubPreview(), io, MONO_THEME)

        self.assertEqual(len(frames), 2)
        self.assertEqual(self.session.files.cursor, 1)
        self.assertEqual(set(timeouts), {TICK_TIMEOUT_MS})

    def test_resize_triggers_redraw(self) -> None:
        keys = iter(["", "q"])
        sizes = iter([(80, 24), (100, 30)])
        frames: list[str] = []

        io = LoopIO(read_key=lambda _timeout: next(keys), size=lambda: next(sizes), write=frames.append)
        run_event_cycle(self.session, StubPreview(), io, MONO_THEME)

        self.assertEqual(len(frames), 2)


class KeyRegistryTests(unittest.TestCase):
    def test_dispatch_and_help_rows(self) -> None:
        calls: list[str] = []
        registry = KeyRegistry().register_bindings(
            KeyBinding(("x", "CTRL_D"), lambda: calls.append("x"), "do x"),
            KeyBinding(("y",), lambda: calls.append("y")),
        )

        registry.dispatch("CTRL_D")
        self.assertIsNone(registry.dispatch("z"))

        self.assertEqual(calls, ["x"])
        self.assertIn("y", registry)
        self.assertEqual(registry.help_rows(), [("x/Ctrl+D", "do x")])


if __name__ == "__main__":
    unittest.main()
