"""Regression tests for raw-key decoding.

Covers ESC timing, arrow sequences, and control-key token mapping.
These tests protect interactive input handling in raw terminal mode.
"""

import os
import time
import unittest

from traverse import keys as keys_mod


class ReadKeyRegressionTests(unittest.TestCase):
    def setUp(self) -> None:
        keys_mod._PENDING_BYTES.clear()

    def tearDown(self) -> None:
        keys_mod._PENDING_BYTES.clear()

    def _read_all(self, payload: bytes, count: int) -> list[str]:
        read_fd, write_fd = os.pipe()
        try:
            os.write(write_fd, payload)
            return [keys_mod.read_key(read_fd, timeout_ms=20) for _ in range(count)]
        finally:
            os.close(read_fd)
            os.close(write_fd)

    def test_single_escape_returns_esc_without_second_keypress(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            os.write(write_fd, b"\x1b")
            started = time.monotonic()
            key = keys_mod.read_key(read_fd, timeout_ms=20)
            elapsed = time.monotonic() - started
        finally:
            os.close(read_fd)
            os.close(write_fd)

        self.assertEqual(key, "ESC")
        self.assertLess(elapsed, 0.2)

    def test_arrow_sequences_are_recognized(self) -> None:
        self.assertEqual(self._read_all(b"\x1b[A\x1b[B\x1bOA", 3), ["UP", "DOWN", "UP"])

    def test_escape_does_not_swallow_following_printable_key(self) -> None:
        self.assertEqual(self._read_all(b"\x1ba", 2), ["ESC", "a"])

    def test_control_keys_are_recognized(self) -> None:
        self.assertEqual(
            self._read_all(b"\x03\x04\x0e\x10\r\n\x7f\x08", 8),
            ["CTRL_C", "CTRL_D", "CTRL_N", "CTRL_P", "ENTER", "ENTER", "BACKSPACE", "BACKSPACE"],
        )

    def test_multibyte_utf8_character_is_one_token(self) -> None:
        self.assertEqual(self._read_all("é?".encode("utf-8"), 2), ["é", "?"])

    def test_unknown_csi_sequence_is_drained(self) -> None:
        self.assertEqual(self._read_all(b"\x1b[3~q", 2), ["UNKNOWN", "q"])

    def test_timeout_returns_empty_string(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            key = keys_mod.read_key(read_fd, timeout_ms=10)
        finally:
            os.close(read_fd)
            os.close(write_fd)

        self.assertEqual(key, "")


if __name__ == "__main__":
    unittest.main()
