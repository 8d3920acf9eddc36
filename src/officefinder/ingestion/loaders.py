"""Format dispatch: pick the extractor for a file by its suffix."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Optional

from officefinder.ingestion import docx_loader, odt_loader, xlsx_loader
from officefinder.models import ExtractedDocument


class DocumentFormat(str, Enum):
    ODT = ".odt"
    DOCX = ".docx"
    XLSX = ".xlsx"


_EXTRACTORS: Dict[DocumentFormat, Callable[[Path], str]] = {
    DocumentFormat.ODT: odt_loader.extract_text,
    DocumentFormat.DOCX: docx_loader.extract_text,
    DocumentFormat.XLSX: xlsx_loader.extract_text,
}

SUPPORTED_SUFFIXES = tuple(fmt.value for fmt in DocumentFormat)


def detect_format(path: Path) -> Optional[DocumentFormat]:
    """Format for ``path`` by case-insensitive suffix, or None when unsupported."""
    name = path.name.lower()
    for fmt in DocumentFormat:
        if name.endswith(fmt.value):
            return fmt
    return None


def extract_text(path: Path, fmt: Optional[DocumentFormat] = None) -> str:
    fmt = fmt or detect_format(path)
    if fmt is None:
        raise ValueError(f"Unsupported document type: {path}")
    return _EXTRACTORS[fmt](path)


def load_document(path: Path, fmt: Optional[DocumentFormat] = None) -> ExtractedDocument:
    """Extract and wrap the normalized text of one document."""
    return ExtractedDocument(path=path, text=extract_text(path, fmt))
