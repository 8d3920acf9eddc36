"""OpenDocument text (ODT) extraction."""

from __future__ import annotations

import logging
from pathlib import Path

from officefinder.errors import (
    MissingPartError,
    NotAContainerError,
    NotAZipError,
    RequiredPartMissingError,
)
from officefinder.ingestion.container import open_archive
from officefinder.ingestion.xml_parts import parse_part, text_content
from officefinder.utils.text import normalize_whitespace

LOGGER = logging.getLogger(__name__)

CONTENT_PART = "content.xml"


def extract_text(path: Path) -> str:
    """Return the normalized text of ``content.xml``."""
    try:
        archive = open_archive(path)
    except NotAZipError as exc:
        raise NotAContainerError(str(exc)) from exc

    with archive:
        try:
            root = parse_part(archive, CONTENT_PART)
        except MissingPartError as exc:
            raise RequiredPartMissingError(CONTENT_PART) from exc
        text = text_content(root)

    LOGGER.debug("Extracted %d characters from %s", len(text), path)
    return normalize_whitespace(text)
