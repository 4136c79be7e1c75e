"""Recursive fuzzy filename search rooted at the working directory.

Each query performs a fresh ``os.walk``; results are ordered by score and
then by path so identical inputs always produce identical output.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

LOGGER = logging.getLogger(__name__)

def fuzzy_score(query: str, candidate: str) -> int | None:
    """Score ``candidate`` for ``query`` as a case-insensitive subsequence.

    Contiguous runs and hits at word boundaries raise the score, gaps and
    long candidates lower it. Returns ``None`` when ``query`` is not a
    subsequence of ``candidate``; an empty query scores 0.
    """
    if not query:
        return 0
    query_folded = query.casefold()
    candidate_folded = candidate.casefold()

    score = 0
    prev_idx = -1
    run = 0
    for needle in query_folded:
        idx = candidate_folded.find(needle, prev_idx + 1)
        if idx < 0:
            return None
        if idx == prev_idx + 1:
            run += 1
            score += 20 + min(16, run * 4)
        else:
            gap = idx - prev_idx - 1
            run = 0
            score -= min(40, gap * 2)
        if idx == 0 or candidate_folded[idx - 1] in "/_- .":
            score += 35
        prev_idx = idx

    score -= len(candidate_folded) // 5
    return score


def _log_walk_error(exc: OSError) -> None:
    LOGGER.debug("Skipping unreadable directory %s: %s", exc.filename, exc.strerror)


def walk_files(
    root: Path,
    show_hidden: bool,
    exclusions: frozenset[str] | set[str],
) -> Iterator[Path]:
    """Yield regular files below ``root`` in a deterministic walk order."""
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        dirnames[:] = [name for name in dirnames if name not in exclusions]
        if not show_hidden:
            dirnames[:] = [name for name in dirnames if not name.startswith(".")]
            filenames = [name for name in filenames if not name.startswith(".")]
        dirnames.sort()
        filenames.sort()
        base = Path(dirpath)
        for filename in filenames:
            path = base / filename
            if path.is_file():
                yield path


def locate_files(
    root: Path,
    query: str,
    show_hidden: bool,
    exclusions: frozenset[str] | set[str],
) -> list[Path]:
    """Return files under ``root`` whose name fuzzily matches ``query``.

    A file is included when its score is strictly positive or its name is
    exactly ``query``. An empty query matches nothing.
    """
    if not query:
        return []
    scored: list[tuple[int, int, str, Path]] = []
    for path in walk_files(root, show_hidden, exclusions):
        name = path.name
        score = fuzzy_score(query, name)
        if score is None:
            continue
        if score <= 0 and name != query:
            continue
        scored.append((-score, len(name), str(path), path))
    scored.sort(key=lambda item: item[:3])
    LOGGER.debug("Fuzzy query %r under %s matched %d files", query, root, len(scored))
    return [item[3] for item in scored]
