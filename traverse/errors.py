"""Exception hierarchy for recoverable traverse failures.

The session catches ``TraverseError`` subclasses and turns them into status
messages; anything else propagates out of the main loop.
"""

from __future__ import annotations

from pathlib import Path


class TraverseError(Exception):
    """Base class for every error the browser reports instead of crashing on."""


class ConfigError(TraverseError):
    """Raised when the config file cannot be created or read."""


class SnapshotError(TraverseError):
    """Raised when a directory cannot be listed at all."""

    def __init__(self, directory: Path, reason: str) -> None:
        self.directory = directory
        self.reason = reason
        super().__init__(f"Cannot list {directory}: {reason}")


class NavigationError(TraverseError):
    """Raised when changing the working directory fails."""

    def __init__(self, target: str, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(f"Cannot open {target}: {reason}")


class FileOperationError(TraverseError):
    """A create, rename, trash, copy, move or extract call failed."""

    def __init__(self, operation: str, path: Path | str, reason: str) -> None:
        self.operation = operation
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{operation} failed for {self.path.name or self.path}: {reason}")


class ArchiveError(FileOperationError):
    """Archive is malformed or in a format that cannot be extracted."""

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__("extract", path, reason)


class BookmarkPersistError(TraverseError):
    """The bookmark file could not be written; memory already holds the change."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot save bookmarks to {path}: {reason}")
