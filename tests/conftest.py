"""Shared fixtures: document factories writing into ``tmp_path``."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Sequence

import pytest

from doc_builders import Cell, odt_content, shared_strings_part, sheet_part, word_part, write_zip


@pytest.fixture
def make_odt() -> Callable[..., Path]:
    def _make(path: Path, paragraphs: Iterable[str] = ()) -> Path:
        return write_zip(
            path,
            [
                ("mimetype", "application/vnd.oasis.opendocument.text"),
                ("content.xml", odt_content(paragraphs)),
            ],
        )

    return _make


@pytest.fixture
def make_docx() -> Callable[..., Path]:
    def _make(
        path: Path,
        paragraphs: Iterable[str] = (),
        extra_parts: Optional[Dict[str, str]] = None,
    ) -> Path:
        parts = [
            ("[Content_Types].xml", "<Types/>"),
            ("word/document.xml", word_part("document", paragraphs)),
        ]
        parts.extend((extra_parts or {}).items())
        return write_zip(path, parts)

    return _make


@pytest.fixture
def make_xlsx() -> Callable[..., Path]:
    def _make(
        path: Path,
        sheets: Sequence[Iterable[Iterable[Cell]]] = (),
        shared: Optional[Sequence[str]] = None,
    ) -> Path:
        parts = [("[Content_Types].xml", "<Types/>")]
        if shared is not None:
            parts.append(("xl/sharedStrings.xml", shared_strings_part(shared)))
        for index, rows in enumerate(sheets, start=1):
            parts.append((f"xl/worksheets/sheet{index}.xml", sheet_part(rows)))
        return write_zip(path, parts)

    return _make


@pytest.hookimpl(hookwrapper=True, tryfirst=True)
def pytest_sessionfinish(session: pytest.Session, exitstatus: int):
    # The deep-nesting tests leave >1000-level trees under the temp basetemp;
    # pytest's own recursive cleanup of old basetemps needs a higher limit.
    # Raised only after all tests have run.
    import sys

    previous = sys.getrecursionlimit()
    sys.setrecursionlimit(max(previous, 20000))
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)
