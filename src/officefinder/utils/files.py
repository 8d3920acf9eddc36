"""Utility helpers for working with files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from officefinder.errors import TraversalError


def canonical_path(path: Path) -> Path:
    """Absolute, symlink-resolved path, case-folded on case-insensitive platforms."""
    return Path(os.path.normcase(os.path.realpath(path)))


def _sorted_entries(
    directory: Path, on_error: Optional[Callable[[TraversalError], None]]
) -> Optional[List[os.DirEntry]]:
    try:
        with os.scandir(directory) as listing:
            return sorted(listing, key=lambda entry: entry.name)
    except OSError as exc:
        if on_error is not None:
            on_error(TraversalError(directory, exc.strerror or str(exc)))
        return None


def walk_files(
    root: Path,
    *,
    should_stop: Optional[Callable[[], bool]] = None,
    on_error: Optional[Callable[[TraversalError], None]] = None,
) -> Iterator[Path]:
    """Yield regular files under ``root`` depth-first, entries sorted by name.

    ``should_stop`` is polled before every directory entry; once it returns
    True nothing else is yielded. Unreadable directories and entries are
    reported to ``on_error`` and skipped. Symlinked directories are not
    followed. Nesting depth is bounded only by the filesystem.
    """
    stop = should_stop or (lambda: False)
    entries = _sorted_entries(root, on_error)
    if entries is None:
        return

    # One iterator per open directory, innermost last
    pending: List[Iterator[os.DirEntry]] = [iter(entries)]
    while pending:
        entry = next(pending[-1], None)
        if entry is None:
            pending.pop()
            continue
        if stop():
            return
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = not is_dir and entry.is_file()
        except OSError as exc:
            if on_error is not None:
                on_error(TraversalError(Path(entry.path), exc.strerror or str(exc)))
            continue

        if is_dir:
            children = _sorted_entries(Path(entry.path), on_error)
            if children:
                pending.append(iter(children))
        elif is_file:
            yield Path(entry.path)
