"""Staged paths and the batch copy/move applied to them.

Paths are staged from any directory and applied later to whichever
directory is current when the operations menu is confirmed.
"""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from . import fs_ops
from .errors import FileOperationError

LOGGER = logging.getLogger(__name__)


class BatchOperation(enum.Enum):
    COPY = "Copy here"
    MOVE = "Move here"
    CLEAR = "Clear selection"

    @property
    def label(self) -> str:
        return self.value


OPERATIONS_MENU: tuple[BatchOperation, ...] = (
    BatchOperation.COPY,
    BatchOperation.MOVE,
    BatchOperation.CLEAR,
)


@dataclass
class BatchResult:
    operation: BatchOperation
    done: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    errors: list[FileOperationError] = field(default_factory=list)

    def summary(self) -> str:
        if self.operation is BatchOperation.CLEAR:
            return "Selection cleared"
        verb = "Copied" if self.operation is BatchOperation.COPY else "Moved"
        parts = [f"{verb} {len(self.done)}"]
        if self.skipped:
            parts.append(f"skipped {len(self.skipped)} (name exists)")
        if self.failed:
            parts.append(f"failed {len(self.failed)}")
        return ", ".join(parts)


class SelectionBuffer:
    def __init__(self) -> None:
        self.paths: list[str] = []

    def __len__(self) -> int:
        return len(self.paths)

    def __iter__(self):
        return iter(self.paths)

    def stage(self, path: Path | str) -> bool:
        """Append an absolute path; exact duplicates are ignored."""
        entry = os.path.abspath(path)
        if entry in self.paths:
            return False
        self.paths.append(entry)
        return True

    def clear(self) -> None:
        self.paths.clear()

    def execute(self, operation: BatchOperation, destination: Path | None = None) -> BatchResult:
        """Apply ``operation`` to every staged path.

        Paths whose basename already exists in ``destination`` are skipped.
        Only paths that failed remain staged afterwards.
        """
        result = BatchResult(operation)
        if operation is BatchOperation.CLEAR:
            self.clear()
            return result

        target_dir = destination if destination is not None else Path(".")
        try:
            existing = set(os.listdir(target_dir))
        except OSError as exc:
            raise FileOperationError(operation.label.lower(), target_dir, exc.strerror or str(exc)) from exc
        transfer = fs_ops.copy_into if operation is BatchOperation.COPY else fs_ops.move_into
        for entry in self.paths:
            source = Path(entry)
            if source.name in existing:
                result.skipped.append(entry)
                continue
            try:
                transfer(source, target_dir)
            except FileOperationError as exc:
                LOGGER.warning("%s", exc)
                result.failed.append(entry)
                result.errors.append(exc)
                continue
            existing.add(source.name)
            result.done.append(entry)

        self.paths = list(result.failed)
        LOGGER.info("%s into %s", result.summary(), target_dir)
        return result
