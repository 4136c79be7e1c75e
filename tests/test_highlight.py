"""Targeted tests for text sanitization and Pygments highlighting.

Ensures control bytes are escaped while standard whitespace is preserved.
"""

import re
import unittest
from pathlib import Path

from traverse.highlight import colorize_source, decode_text, normalize_style, sanitize_terminal_text

ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")


class HighlightSanitizationTests(unittest.TestCase):
    def test_sanitize_terminal_text_escapes_control_bytes_but_keeps_common_whitespace(self) -> None:
        source = "a\tb\nc\rd\x07e\x1bf"
        sanitized = sanitize_terminal_text(source)

        self.assertEqual(sanitized, "a\tb\nc\rd\\x07e\\x1bf")
        self.assertNotIn("\x07", sanitized)
        self.assertNotIn("\x1b", sanitized)

    def test_plain_text_keeps_spacing_for_extensionless_files(self) -> None:
        source = "Permission  is  hereby granted, free of charge:\n"

        rendered = colorize_source(source, Path("LICENSE"))

        self.assertEqual(ANSI_RE.sub("", rendered), source)

    def test_python_source_is_colored(self) -> None:
        rendered = colorize_source("import os\n", Path("mod.py"))

        self.assertIn("\x1b[", rendered)
        self.assertEqual(ANSI_RE.sub("", rendered), "import os\n")

    def test_unknown_style_falls_back_to_default(self) -> None:
        self.assertEqual(normalize_style("no-such-style"), "monokai")
        self.assertEqual(normalize_style("native"), "native")

    def test_decode_text_falls_back_to_latin1(self) -> None:
        self.assertEqual(decode_text("caf\xe9".encode("latin-1")), "caf\xe9")


if __name__ == "__main__":
    unittest.main()
