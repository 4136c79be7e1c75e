from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from traverse.errors import FileOperationError
from traverse.selection import BatchOperation, SelectionBuffer


class SelectionBufferTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.source = self.root / "source"
        self.dest = self.root / "dest"
        self.source.mkdir()
        self.dest.mkdir()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_stage_dedupes_by_exact_path(self) -> None:
        buffer = SelectionBuffer()

        self.assertTrue(buffer.stage(self.source / "a.txt"))
        self.assertFalse(buffer.stage(self.source / "a.txt"))
        self.assertEqual(buffer.paths, [str(self.source / "a.txt")])

    def test_copy_copies_files_and_directories_then_clears(self) -> None:
        (self.source / "a.txt").write_text("alpha", encoding="utf-8")
        (self.source / "tree").mkdir()
        (self.source / "tree" / "leaf.txt").write_text("leaf", encoding="utf-8")
        buffer = SelectionBuffer()
        buffer.stage(self.source / "a.txt")
        buffer.stage(self.source / "tree")

        result = buffer.execute(BatchOperation.COPY, self.dest)

        self.assertEqual(len(result.done), 2)
        self.assertEqual((self.dest / "a.txt").read_text(encoding="utf-8"), "alpha")
        self.assertEqual((self.dest / "tree" / "leaf.txt").read_text(encoding="utf-8"), "leaf")
        self.assertTrue((self.source / "a.txt").exists())
        self.assertEqual(len(buffer), 0)

    def test_move_skips_name_collisions(self) -> None:
        (self.source / "clash.txt").write_text("new", encoding="utf-8")
        (self.source / "fresh.txt").write_text("fresh", encoding="utf-8")
        (self.dest / "clash.txt").write_text("old", encoding="utf-8")
        buffer = SelectionBuffer()
        buffer.stage(self.source / "clash.txt")
        buffer.stage(self.source / "fresh.txt")

        result = buffer.execute(BatchOperation.MOVE, self.dest)

        self.assertEqual(result.skipped, [str(self.source / "clash.txt")])
        self.assertEqual(result.done, [str(self.source / "fresh.txt")])
        self.assertEqual((self.dest / "clash.txt").read_text(encoding="utf-8"), "old")
        self.assertTrue((self.dest / "fresh.txt").exists())
        self.assertFalse((self.source / "fresh.txt").exists())
        self.assertEqual(result.summary(), "Moved 1, skipped 1 (name exists)")

    def test_failed_paths_stay_staged(self) -> None:
        (self.source / "ok.txt").write_text("ok", encoding="utf-8")
        buffer = SelectionBuffer()
        buffer.stage(self.source / "missing.txt")
        buffer.stage(self.source / "ok.txt")

        result = buffer.execute(BatchOperation.COPY, self.dest)

        self.assertEqual(result.failed, [str(self.source / "missing.txt")])
        self.assertIsInstance(result.errors[0], FileOperationError)
        self.assertEqual(buffer.paths, [str(self.source / "missing.txt")])

    def test_clear_does_not_touch_filesystem(self) -> None:
        (self.source / "a.txt").write_text("a", encoding="utf-8")
        buffer = SelectionBuffer()
        buffer.stage(self.source / "a.txt")

        with mock.patch("traverse.selection.fs_ops.copy_into") as copy_mock, mock.patch(
            "traverse.selection.fs_ops.move_into"
        ) as move_mock:
            result = buffer.execute(BatchOperation.CLEAR, self.dest)

        copy_mock.assert_not_called()
        move_mock.assert_not_called()
        self.assertEqual(len(buffer), 0)
        self.assertEqual(result.summary(), "Selection cleared")
        self.assertEqual(list(self.dest.iterdir()), [])


if __name__ == "__main__":
    unittest.main()
