from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from traverse import config


class ConfigBehaviorTests(unittest.TestCase):
    def test_first_run_writes_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "traverse" / "config.txt"
            with mock.patch("traverse.config.CONFIG_PATH", config_path):
                loaded = config.load_config()

            self.assertEqual(
                config_path.read_text(encoding="utf-8"),
                "show_hidden=false\nexcluded_directories=.git,.idea,.vscode,target\n",
            )
        self.assertFalse(loaded.show_hidden)
        self.assertEqual(loaded.excluded_directories, frozenset({".git", ".idea", ".vscode", "target"}))

    def test_existing_file_is_parsed_and_not_overwritten(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.txt"
            config_path.write_text("show_hidden=TRUE\nexcluded_directories= node_modules , build\n", encoding="utf-8")

            loaded = config.load_config(config_path)

            self.assertIn("node_modules", config_path.read_text(encoding="utf-8"))
        self.assertTrue(loaded.show_hidden)
        self.assertEqual(loaded.excluded_directories, frozenset({"node_modules", "build"}))

    def test_parse_ignores_comments_unknown_keys_and_malformed_lines(self) -> None:
        parsed = config.parse_config("# comment\nshow_hidden=maybe\ncolor=blue\njust words\n\nshow_hidden=true\n")

        self.assertTrue(parsed.show_hidden)
        self.assertEqual(parsed.excluded_directories, frozenset(config.DEFAULT_EXCLUDED_DIRECTORIES))

    def test_empty_exclusion_list_is_allowed(self) -> None:
        parsed = config.parse_config("excluded_directories=\n")

        self.assertEqual(parsed.excluded_directories, frozenset())

    def test_unwritable_location_falls_back_to_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "blocker"
            blocker.write_text("", encoding="utf-8")

            loaded = config.load_config(blocker / "config.txt")

        self.assertEqual(loaded, config.AppConfig())


if __name__ == "__main__":
    unittest.main()
