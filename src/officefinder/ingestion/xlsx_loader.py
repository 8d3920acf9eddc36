"""Excel (XLSX) extraction.

Cell text is resolved per cell type:

* ``s`` - index into ``xl/sharedStrings.xml``
* ``str`` - formula result stored in ``<v>``
* ``inlineStr`` - text of the ``<is>`` child
* anything else - raw ``<v>`` value (numbers, dates, booleans)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from lxml import etree

from officefinder.errors import (
    ContainerError,
    ExtractError,
    NotAContainerError,
    NotAZipError,
)
from officefinder.ingestion.container import Archive, open_archive
from officefinder.ingestion.xml_parts import SPREADSHEETML_NS, find_all, find_first, parse_part, text_content
from officefinder.utils.text import join_nonempty, normalize_whitespace

LOGGER = logging.getLogger(__name__)

SHARED_STRINGS_PART = "xl/sharedStrings.xml"
WORKSHEETS_PREFIX = "xl/worksheets/"


def is_worksheet_part(name: str) -> bool:
    return name.startswith(WORKSHEETS_PREFIX) and name.endswith(".xml")


def read_shared_strings(archive: Archive) -> List[str]:
    """Ordered shared string table; empty when the part is absent or unreadable."""
    if not archive.has_part(SHARED_STRINGS_PART):
        return []
    try:
        root = parse_part(archive, SHARED_STRINGS_PART)
    except (ContainerError, ExtractError) as exc:
        LOGGER.warning("Ignoring shared strings in %s: %s", archive.path, exc)
        return []
    return [text_content(item) for item in find_all(root, "si", SPREADSHEETML_NS)]


def _value_text(cell: etree._Element) -> str:
    return text_content(find_first(cell, "v", SPREADSHEETML_NS))


def cell_text(cell: etree._Element, shared: List[str]) -> str:
    cell_type = cell.get("t", "")
    if cell_type == "s":
        raw = _value_text(cell).strip()
        try:
            index = int(raw)
        except ValueError:
            return ""
        return shared[index] if 0 <= index < len(shared) else ""
    if cell_type == "inlineStr":
        return text_content(find_first(cell, "is", SPREADSHEETML_NS))
    return _value_text(cell)


def read_sheet(archive: Archive, name: str, shared: List[str]) -> str:
    """Cells joined by spaces, rows by newlines."""
    root = parse_part(archive, name)
    rows: List[str] = []
    for row in find_all(root, "row", SPREADSHEETML_NS):
        cells = [cell_text(cell, shared) for cell in find_all(row, "c", SPREADSHEETML_NS)]
        rows.append(join_nonempty(cells, " "))
    return join_nonempty(rows)


def extract_text(path: Path) -> str:
    try:
        archive = open_archive(path)
    except NotAZipError as exc:
        raise NotAContainerError(str(exc)) from exc

    sheets: List[str] = []
    with archive:
        shared = read_shared_strings(archive)
        for name in archive.list_parts(is_worksheet_part):
            try:
                sheets.append(read_sheet(archive, name, shared))
            except (ContainerError, ExtractError) as exc:
                LOGGER.warning("Skipping sheet %s in %s: %s", name, path, exc)

    return normalize_whitespace(join_nonempty(sheets))
