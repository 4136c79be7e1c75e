"""Details, contents, and disk-usage text for the preview panes.

``PreviewProvider`` is the capability the session and renderer depend on;
``SystemPreviewProvider`` implements it with ``os.stat``, Pygments, and the
``file``/``ffprobe`` tools where they are installed.
"""

from __future__ import annotations

import grp
import logging
import os
import pwd
import shutil
import stat
import subprocess
import time
from pathlib import Path
from typing import Protocol

from .highlight import DEFAULT_STYLE, colorize_source, decode_text, sanitize_terminal_text

LOGGER = logging.getLogger(__name__)

CONTENT_PREVIEW_LINES = 30
MAX_PREVIEW_BYTES = 512 * 1024
BINARY_SNIFF_BYTES = 8192
EXTERNAL_TOOL_TIMEOUT_SECONDS = 2.0
NO_DETAILS_MESSAGE = "Cannot get details of file"
IMAGE_SUFFIXES = frozenset({".png", ".jpg", ".jpeg", ".gif"})
MEDIA_SUFFIXES = frozenset({".mp3", ".mp4", ".mkv", ".wav", ".flac"})
BYTE_UNITS: tuple[str, ...] = ("B", "KB", "MB", "GB", "TB", "PB")


class PreviewProvider(Protocol):
    def details(self, path: Path) -> list[str]: ...

    def contents(self, path: Path, max_lines: int = CONTENT_PREVIEW_LINES) -> list[str]: ...


def convert_bytes(size: float) -> str:
    """Format ``size`` with the largest unit that keeps it above 1024."""
    value = float(size)
    unit_index = 0
    while value > 1024 and unit_index < len(BYTE_UNITS) - 1:
        value /= 1024
        unit_index += 1
    if unit_index == 0:
        return f"{int(value)} {BYTE_UNITS[0]}"
    return f"{value:.1f} {BYTE_UNITS[unit_index]}"


def disk_usage_label(path: Path) -> str:
    try:
        usage = shutil.disk_usage(path)
    except OSError as exc:
        LOGGER.debug("disk_usage failed for %s: %s", path, exc)
        return "Disk usage unavailable"
    return f"{convert_bytes(usage.used)} used / {convert_bytes(usage.total)} total / {convert_bytes(usage.free)} free"


def _owner_name(uid: int) -> str:
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


def _group_name(gid: int) -> str:
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return str(gid)


def stat_details(path: Path) -> list[str]:
    """ls-style summary of ``path``: mode, owner, size, and mtime."""
    info = path.stat()
    modified = time.strftime("%Y-%m-%d %H:%M", time.localtime(info.st_mtime))
    return [
        f"Permissions: {stat.filemode(info.st_mode)}",
        f"Owner: {_owner_name(info.st_uid)}:{_group_name(info.st_gid)}",
        f"Size: {convert_bytes(info.st_size)}",
        f"Modified: {modified}",
    ]


def run_tool(command: list[str]) -> list[str]:
    """Run an inspection tool; any failure yields an empty list."""
    try:
        completed = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            timeout=EXTERNAL_TOOL_TIMEOUT_SECONDS,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        LOGGER.debug("%s failed: %s", command[0], exc)
        return []
    if completed.returncode != 0:
        LOGGER.debug("%s exited with %d", command[0], completed.returncode)
        return []
    return [sanitize_terminal_text(line.rstrip()) for line in completed.stdout.splitlines() if line.strip()]


def _media_lines(output: list[str]) -> list[str]:
    # Drop the ffprobe build banner.
    for index, line in enumerate(output):
        if line.startswith("Input #"):
            return output[index:]
    return output


class SystemPreviewProvider:
    def __init__(self, style: str = DEFAULT_STYLE, no_color: bool = False, show_hidden: bool = False) -> None:
        self.style = style
        self.no_color = no_color
        self.show_hidden = show_hidden
        self._cache: dict[tuple[str, str, int], tuple[tuple[int, int], list[str]]] = {}

    def _cached(self, path: Path, kind: str, max_lines: int, build) -> list[str]:
        try:
            info = path.stat()
        except OSError as exc:
            return [f"Cannot read {path.name}: {exc.strerror or exc}"]
        stamp = (info.st_mtime_ns, info.st_size)
        key = (str(path.resolve()), kind, max_lines)
        cached = self._cache.get(key)
        if cached is not None and cached[0] == stamp:
            return cached[1]
        lines = build(path, max_lines)
        self._cache[key] = (stamp, lines)
        return lines

    def details(self, path: Path) -> list[str]:
        return self._cached(path, "details", 0, self._build_details)

    def contents(self, path: Path, max_lines: int = CONTENT_PREVIEW_LINES) -> list[str]:
        return self._cached(path, "contents", max_lines, self._build_contents)

    def _build_details(self, path: Path, _max_lines: int) -> list[str]:
        suffix = path.suffix.lower()
        if path.is_file() and suffix in IMAGE_SUFFIXES:
            return run_tool(["file", "-b", os.fspath(path)]) or [NO_DETAILS_MESSAGE]
        if path.is_file() and suffix in MEDIA_SUFFIXES:
            return _media_lines(run_tool(["ffprobe", "-hide_banner", os.fspath(path)])) or [NO_DETAILS_MESSAGE]
        try:
            return stat_details(path)
        except OSError as exc:
            LOGGER.debug("stat failed for %s: %s", path, exc)
            return [NO_DETAILS_MESSAGE]

    def _build_contents(self, path: Path, max_lines: int) -> list[str]:
        if path.is_dir():
            return self._directory_contents(path, max_lines)
        try:
            with path.open("rb") as handle:
                data = handle.read(MAX_PREVIEW_BYTES)
                truncated = bool(handle.read(1))
        except OSError as exc:
            return [f"Cannot read {path.name}: {exc.strerror or exc}"]
        if b"\x00" in data[:BINARY_SNIFF_BYTES]:
            return [f"Binary file, {convert_bytes(path.stat().st_size)}"]

        text = decode_text(data)
        lines = text.splitlines()
        total = len(lines)
        shown = "\n".join(lines[:max_lines])
        if self.no_color:
            rendered = sanitize_terminal_text(shown).splitlines()
        else:
            rendered = colorize_source(shown, path, self.style).splitlines()
        if total > max_lines:
            more = f"... {total - max_lines} more lines"
            if truncated:
                more = f"... more than {total - max_lines} more lines"
            rendered.append(more)
        rendered.append(f"{total}+ total" if truncated else f"{total} total")
        return rendered

    def _directory_contents(self, path: Path, max_lines: int) -> list[str]:
        try:
            with os.scandir(path) as entries:
                names = [
                    child.name + ("/" if child.is_dir() else "")
                    for child in entries
                    if self.show_hidden or not child.name.startswith(".")
                ]
        except OSError as exc:
            return [f"Cannot list {path.name}: {exc.strerror or exc}"]
        names.sort(key=lambda name: (name.startswith("."), name))
        if not names:
            return ["(empty directory)"]
        lines = names[:max_lines]
        if len(names) > max_lines:
            lines.append(f"... {len(names) - max_lines} more entries")
        lines.append(f"{len(names)} total")
        return lines
