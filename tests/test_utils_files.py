"""Tests for file utility functions."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

from officefinder.errors import TraversalError
from officefinder.utils.files import canonical_path, walk_files


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
    return path


class TestWalkFiles:
    """Test walk_files function."""

    def test_walks_recursively_in_name_order(self, tmp_path: Path) -> None:
        """Files are yielded depth-first with entries sorted by name."""
        _touch(tmp_path / "b.txt")
        _touch(tmp_path / "a" / "z.odt")
        _touch(tmp_path / "a" / "deep" / "y.docx")
        _touch(tmp_path / "c" / "x.xlsx")

        names = [p.relative_to(tmp_path).as_posix() for p in walk_files(tmp_path)]

        assert names == ["a/deep/y.docx", "a/z.odt", "b.txt", "c/x.xlsx"]

    def test_empty_directory(self, tmp_path: Path) -> None:
        assert list(walk_files(tmp_path)) == []

    def test_should_stop_ends_walk(self, tmp_path: Path) -> None:
        """Nothing is yielded once should_stop returns True."""
        for name in ("a.odt", "b.odt", "c.odt"):
            _touch(tmp_path / name)
        seen: list[Path] = []

        for path in walk_files(tmp_path, should_stop=lambda: len(seen) >= 1):
            seen.append(path)

        assert [p.name for p in seen] == ["a.odt"]

    def test_unreadable_directory_reported_and_skipped(self, tmp_path: Path) -> None:
        """A directory that cannot be listed is reported; siblings are still walked."""
        locked = tmp_path / "locked"
        _touch(locked / "hidden.odt")
        _touch(tmp_path / "open" / "visible.odt")
        errors: list[TraversalError] = []
        real_scandir = os.scandir

        def fake_scandir(path):  # type: ignore[no-untyped-def]
            if Path(path) == locked:
                raise PermissionError(13, "Permission denied")
            return real_scandir(path)

        with patch("officefinder.utils.files.os.scandir", side_effect=fake_scandir):
            names = [p.name for p in walk_files(tmp_path, on_error=errors.append)]

        assert names == ["visible.odt"]
        assert len(errors) == 1
        assert errors[0].path == locked
        assert "Permission denied" in str(errors[0])

    def test_missing_root_reported(self, tmp_path: Path) -> None:
        errors: list[TraversalError] = []
        assert list(walk_files(tmp_path / "nope", on_error=errors.append)) == []
        assert len(errors) == 1

    def test_deeply_nested_tree(self, tmp_path: Path) -> None:
        """Nesting deeper than the interpreter's recursion limit is walked."""
        current = tmp_path
        for _ in range(1100):
            current = current / "d"
            os.mkdir(current)
        deep = _touch(current / "x.odt")
        _touch(tmp_path / "z.odt")

        assert list(walk_files(tmp_path)) == [deep, tmp_path / "z.odt"]


class TestCanonicalPath:
    """Test canonical_path function."""

    def test_resolves_relative_segments(self, tmp_path: Path) -> None:
        target = _touch(tmp_path / "dir" / "file.odt")
        indirect = tmp_path / "dir" / ".." / "dir" / "file.odt"

        assert canonical_path(indirect) == canonical_path(target)
        assert canonical_path(indirect).is_absolute()

    def test_resolves_symlinks(self, tmp_path: Path) -> None:
        target = _touch(tmp_path / "real.odt")
        link = tmp_path / "link.odt"
        link.symlink_to(target)

        assert canonical_path(link) == canonical_path(target)
