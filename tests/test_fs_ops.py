from __future__ import annotations

import io
import tarfile
import tempfile
import unittest
import zipfile
from pathlib import Path
from unittest import mock

from traverse import fs_ops
from traverse.errors import ArchiveError, FileOperationError


class FileOperationTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_create_file_is_exclusive(self) -> None:
        created = fs_ops.create_file("x.txt", self.root)

        self.assertEqual(created, self.root / "x.txt")
        self.assertEqual(created.read_text(encoding="utf-8"), "")
        with self.assertRaises(FileOperationError):
            fs_ops.create_file("x.txt", self.root)

    def test_create_directory_rejects_existing_name(self) -> None:
        fs_ops.create_directory("pkg", self.root)

        self.assertTrue((self.root / "pkg").is_dir())
        with self.assertRaises(FileOperationError):
            fs_ops.create_directory("pkg", self.root)

    def test_names_with_separators_or_reserved_names_are_rejected(self) -> None:
        for name in ("", "   ", ".", "..", "a/b"):
            with self.subTest(name=name):
                with self.assertRaises(FileOperationError):
                    fs_ops.create_file(name, self.root)

    def test_rename_refuses_to_overwrite(self) -> None:
        (self.root / "a.txt").write_text("a", encoding="utf-8")
        (self.root / "b.txt").write_text("b", encoding="utf-8")

        with self.assertRaises(FileOperationError):
            fs_ops.rename_entry(self.root / "a.txt", "b.txt")
        self.assertEqual((self.root / "b.txt").read_text(encoding="utf-8"), "b")

    def test_rename_moves_entry_within_directory(self) -> None:
        (self.root / "old").mkdir()

        renamed = fs_ops.rename_entry(self.root / "old", "new")

        self.assertEqual(renamed, self.root / "new")
        self.assertTrue(renamed.is_dir())
        self.assertFalse((self.root / "old").exists())

    def test_rename_to_same_name_is_noop(self) -> None:
        (self.root / "same").write_text("", encoding="utf-8")

        self.assertEqual(fs_ops.rename_entry(self.root / "same", "same"), self.root / "same")

    def test_trash_uses_send2trash(self) -> None:
        target = self.root / "junk.txt"
        target.write_text("", encoding="utf-8")

        with mock.patch("traverse.fs_ops.send2trash") as trash_mock:
            fs_ops.trash_entry(target)

        trash_mock.assert_called_once_with(str(target))

    def test_trash_failure_is_wrapped(self) -> None:
        with mock.patch("traverse.fs_ops.send2trash", side_effect=OSError(13, "Permission denied")):
            with self.assertRaises(FileOperationError) as ctx:
                fs_ops.trash_entry(self.root / "locked")

        self.assertEqual(ctx.exception.reason, "Permission denied")


def _write_zip_with_patched_headers(path: Path, encrypted: bool = False, method: int | None = None) -> None:
    with zipfile.ZipFile(path, "w") as bundle:
        bundle.writestr("a.txt", "secret")
    data = bytearray(path.read_bytes())
    central = data.find(b"PK\x01\x02")
    # general purpose flags sit at +6 (local) and +8 (central), method right after
    for flags_at in (6, central + 8):
        if encrypted:
            data[flags_at] |= 0x01
        if method is not None:
            data[flags_at + 2 : flags_at + 4] = method.to_bytes(2, "little")
    path.write_bytes(bytes(data))


class ArchiveExtractionTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_zip_extracts_into_destination(self) -> None:
        archive = self.root / "bundle.zip"
        with zipfile.ZipFile(archive, "w") as bundle:
            bundle.writestr("docs/readme.txt", "hello")

        names = fs_ops.extract_archive(archive, self.root)

        self.assertEqual(names, ["docs/readme.txt"])
        self.assertEqual((self.root / "docs" / "readme.txt").read_text(encoding="utf-8"), "hello")

    def test_tar_gz_extracts_into_destination(self) -> None:
        archive = self.root / "bundle.tar.gz"
        payload = b"packed"
        with tarfile.open(archive, "w:gz") as bundle:
            info = tarfile.TarInfo("inner.txt")
            info.size = len(payload)
            bundle.addfile(info, io.BytesIO(payload))

        fs_ops.extract_archive(archive, self.root)

        self.assertEqual((self.root / "inner.txt").read_bytes(), payload)

    def test_unsupported_format_raises_archive_error(self) -> None:
        plain = self.root / "notes.txt"
        plain.write_text("text", encoding="utf-8")

        with self.assertRaises(ArchiveError):
            fs_ops.extract_archive(plain, self.root)

    def test_malformed_zip_raises_archive_error(self) -> None:
        broken = self.root / "broken.zip"
        broken.write_bytes(b"not a zip at all")

        with self.assertRaises(ArchiveError):
            fs_ops.extract_archive(broken, self.root)

    def test_encrypted_zip_member_raises_archive_error(self) -> None:
        archive = self.root / "locked.zip"
        _write_zip_with_patched_headers(archive, encrypted=True)

        with self.assertRaises(ArchiveError) as caught:
            fs_ops.extract_archive(archive, self.root)

        self.assertIn("password", str(caught.exception))
        self.assertFalse((self.root / "a.txt").exists())

    def test_unknown_compression_method_raises_archive_error(self) -> None:
        archive = self.root / "exotic.zip"
        _write_zip_with_patched_headers(archive, method=99)

        with self.assertRaises(ArchiveError):
            fs_ops.extract_archive(archive, self.root)

    def test_archive_detection_is_case_insensitive(self) -> None:
        self.assertTrue(fs_ops.is_archive(Path("A.TAR.GZ")))
        self.assertTrue(fs_ops.is_archive(Path("b.tgz")))
        self.assertFalse(fs_ops.is_archive(Path("c.gz")))


if __name__ == "__main__":
    unittest.main()
