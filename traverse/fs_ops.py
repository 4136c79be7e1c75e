"""Filesystem mutations used by session commands.

Each helper raises ``FileOperationError`` (or ``ArchiveError``) wrapping the
underlying ``OSError`` so the session can report it without crashing.
"""

from __future__ import annotations

import logging
import os
import shutil
import tarfile
import zipfile
from pathlib import Path

from send2trash import send2trash
from send2trash.exceptions import TrashPermissionError

from .errors import ArchiveError, FileOperationError

LOGGER = logging.getLogger(__name__)

TAR_SUFFIXES: tuple[str, ...] = (".tar", ".tar.gz", ".tgz", ".tar.bz2", ".tbz2", ".tar.xz", ".txz")
ZIP_SUFFIXES: tuple[str, ...] = (".zip",)


def _reason(exc: BaseException) -> str:
    if isinstance(exc, OSError) and exc.strerror:
        return exc.strerror
    return str(exc) or exc.__class__.__name__


def validate_entry_name(name: str, operation: str) -> str:
    """Reject names that would escape the working directory."""
    stripped = name.strip()
    if not stripped:
        raise FileOperationError(operation, name, "name is empty")
    if stripped in {".", ".."}:
        raise FileOperationError(operation, stripped, "reserved name")
    separators = {os.sep, os.altsep} - {None}
    if any(sep in stripped for sep in separators):
        raise FileOperationError(operation, stripped, "name must not contain a path separator")
    return stripped


def create_file(name: str, directory: Path | None = None) -> Path:
    base = directory if directory is not None else Path(".")
    target = base / validate_entry_name(name, "create file")
    try:
        with target.open("x", encoding="utf-8"):
            pass
    except OSError as exc:
        raise FileOperationError("create file", target, _reason(exc)) from exc
    LOGGER.info("Created file %s", target)
    return target


def create_directory(name: str, directory: Path | None = None) -> Path:
    base = directory if directory is not None else Path(".")
    target = base / validate_entry_name(name, "create directory")
    try:
        os.mkdir(target)
    except OSError as exc:
        raise FileOperationError("create directory", target, _reason(exc)) from exc
    LOGGER.info("Created directory %s", target)
    return target


def rename_entry(source: Path, new_name: str) -> Path:
    """Rename ``source`` within its directory without overwriting anything."""
    name = validate_entry_name(new_name, "rename")
    target = source.parent / name
    if target.name == source.name:
        return source
    if os.path.lexists(target):
        raise FileOperationError("rename", target, "target already exists")
    try:
        os.rename(source, target)
    except OSError as exc:
        raise FileOperationError("rename", source, _reason(exc)) from exc
    LOGGER.info("Renamed %s to %s", source, target)
    return target


def trash_entry(path: Path) -> None:
    try:
        send2trash(os.fspath(path))
    except (OSError, TrashPermissionError) as exc:
        raise FileOperationError("trash", path, _reason(exc)) from exc
    LOGGER.info("Moved %s to trash", path)


def copy_into(source: Path, destination: Path) -> Path:
    """Copy ``source`` (recursively for directories) into ``destination``."""
    target = destination / source.name
    try:
        if source.is_dir() and not source.is_symlink():
            shutil.copytree(source, target, symlinks=True)
        else:
            shutil.copy2(source, target)
    except (OSError, shutil.Error) as exc:
        raise FileOperationError("copy", source, _reason(exc)) from exc
    return target


def move_into(source: Path, destination: Path) -> Path:
    target = destination / source.name
    try:
        shutil.move(os.fspath(source), os.fspath(target))
    except (OSError, shutil.Error) as exc:
        raise FileOperationError("move", source, _reason(exc)) from exc
    return target


def archive_kind(path: Path) -> str | None:
    name = path.name.lower()
    if name.endswith(ZIP_SUFFIXES):
        return "zip"
    if name.endswith(TAR_SUFFIXES):
        return "tar"
    return None


def is_archive(path: Path) -> bool:
    return archive_kind(path) is not None


def extract_archive(archive: Path, destination: Path | None = None) -> list[str]:
    """Unpack ``archive`` into ``destination`` (default: cwd).

    Tar members go through the ``"data"`` extraction filter, so absolute
    paths, device files and links leaving the destination are refused.
    Returns the member names that were extracted.
    """
    target = destination if destination is not None else Path(".")
    kind = archive_kind(archive)
    if kind is None:
        raise ArchiveError(archive, "unsupported archive format")
    try:
        if kind == "zip":
            with zipfile.ZipFile(archive) as bundle:
                names = bundle.namelist()
                bundle.extractall(target)
        else:
            with tarfile.open(archive, "r:*") as bundle:
                names = bundle.getnames()
                bundle.extractall(target, filter="data")
    except (zipfile.BadZipFile, tarfile.TarError) as exc:
        raise ArchiveError(archive, _reason(exc)) from exc
    except (RuntimeError, NotImplementedError) as exc:
        # encrypted members and unknown compression methods
        raise ArchiveError(archive, str(exc)) from exc
    except OSError as exc:
        raise ArchiveError(archive, _reason(exc)) from exc
    LOGGER.info("Extracted %d members from %s into %s", len(names), archive, target)
    return names
