"""Word (DOCX) extraction: body plus headers, footers and notes."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from officefinder.errors import ContainerError, ExtractError, NotAContainerError, NotAZipError
from officefinder.ingestion.container import Archive, open_archive
from officefinder.ingestion.xml_parts import parse_part, text_content
from officefinder.utils.text import join_nonempty, normalize_whitespace

LOGGER = logging.getLogger(__name__)

DOCUMENT_PART = "word/document.xml"
NOTES_PARTS = ("word/footnotes.xml", "word/endnotes.xml")


def is_auxiliary_part(name: str) -> bool:
    """Headers, footers, footnotes and endnotes."""
    if name.endswith(".xml") and (name.startswith("word/header") or name.startswith("word/footer")):
        return True
    return name in NOTES_PARTS


def _part_text(archive: Archive, name: str) -> str:
    try:
        return text_content(parse_part(archive, name))
    except (ContainerError, ExtractError) as exc:
        # A broken part never discards the text gathered from the others
        LOGGER.warning("Skipping part %s in %s: %s", name, archive.path, exc)
        return ""


def extract_text(path: Path) -> str:
    """Return the normalized text of the body followed by auxiliary parts.

    Parts are joined by newlines: the body first, then headers, footers and
    notes in archive order.
    """
    try:
        archive = open_archive(path)
    except NotAZipError as exc:
        raise NotAContainerError(str(exc)) from exc

    texts: List[str] = []
    with archive:
        if archive.has_part(DOCUMENT_PART):
            texts.append(_part_text(archive, DOCUMENT_PART))
        else:
            LOGGER.warning("No %s in %s", DOCUMENT_PART, path)
        for name in archive.list_parts(is_auxiliary_part):
            texts.append(_part_text(archive, name))

    return normalize_whitespace(join_nonempty(texts))
