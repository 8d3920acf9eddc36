"""Tests for the ODT, DOCX and XLSX extractors and format dispatch."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import pytest

from doc_builders import sheet_part, word_part, write_zip
from officefinder.errors import MalformedXmlError, NotAContainerError, RequiredPartMissingError
from officefinder.ingestion import docx_loader, odt_loader, xlsx_loader
from officefinder.ingestion.loaders import (
    SUPPORTED_SUFFIXES,
    DocumentFormat,
    detect_format,
    extract_text,
    load_document,
)
from officefinder.models import ExtractedDocument


def assert_normalized(text: str) -> None:
    assert "\t" not in text
    assert "\n" not in text
    assert "\r" not in text
    assert "  " not in text
    assert text == text.strip()


class TestOdtLoader:
    """Test ODT text extraction."""

    def test_extracts_paragraph_text(self, tmp_path: Path, make_odt: Callable[..., Path]) -> None:
        path = make_odt(tmp_path / "doc.odt", ["Hello  World", "Second\tline"])

        text = odt_loader.extract_text(path)

        assert text == "Hello World Second line"
        assert_normalized(text)

    def test_missing_content_part(self, tmp_path: Path) -> None:
        path = write_zip(tmp_path / "doc.odt", [("mimetype", "application/vnd.oasis.opendocument.text")])

        with pytest.raises(RequiredPartMissingError) as exc_info:
            odt_loader.extract_text(path)

        assert exc_info.value.part == "content.xml"

    def test_malformed_content(self, tmp_path: Path) -> None:
        path = write_zip(tmp_path / "doc.odt", [("content.xml", "<office:document-content>")])

        with pytest.raises(MalformedXmlError):
            odt_loader.extract_text(path)

    def test_zero_byte_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.odt"
        path.write_bytes(b"")

        with pytest.raises(NotAContainerError):
            odt_loader.extract_text(path)


class TestDocxLoader:
    """Test DOCX text extraction."""

    def test_body_then_auxiliary_parts(self, tmp_path: Path, make_docx: Callable[..., Path]) -> None:
        """Body comes first, then headers, footers and notes in archive order."""
        path = make_docx(
            tmp_path / "doc.docx",
            ["Body text"],
            {
                "word/header1.xml": word_part("hdr", ["Header words"]),
                "word/styles.xml": word_part("styles", ["STYLE NOISE"]),
                "word/footer1.xml": word_part("ftr", ["Footer words"]),
                "word/footnotes.xml": word_part("footnotes", ["Note words"]),
                "word/endnotes.xml": word_part("endnotes", ["End words"]),
            },
        )

        text = docx_loader.extract_text(path)

        assert text == "Body text Header words Footer words Note words End words"
        assert_normalized(text)

    def test_auxiliary_part_names(self) -> None:
        assert docx_loader.is_auxiliary_part("word/header3.xml")
        assert docx_loader.is_auxiliary_part("word/footer1.xml")
        assert docx_loader.is_auxiliary_part("word/endnotes.xml")
        assert not docx_loader.is_auxiliary_part("word/document.xml")
        assert not docx_loader.is_auxiliary_part("word/_rels/header1.xml.rels")
        assert not docx_loader.is_auxiliary_part("word/styles.xml")

    def test_broken_header_is_skipped(
        self, tmp_path: Path, make_docx: Callable[..., Path], caplog: pytest.LogCaptureFixture
    ) -> None:
        path = make_docx(
            tmp_path / "doc.docx",
            ["Body survives"],
            {"word/header1.xml": "<w:hdr><broken"},
        )

        with caplog.at_level(logging.WARNING):
            text = docx_loader.extract_text(path)

        assert text == "Body survives"
        assert "word/header1.xml" in caplog.text

    def test_missing_body_keeps_other_parts(self, tmp_path: Path) -> None:
        path = write_zip(
            tmp_path / "doc.docx",
            [("word/footer1.xml", word_part("ftr", ["Only the footer"]))],
        )

        assert docx_loader.extract_text(path) == "Only the footer"

    def test_not_a_container(self, tmp_path: Path) -> None:
        path = tmp_path / "fake.docx"
        path.write_text("plain text", encoding="utf-8")

        with pytest.raises(NotAContainerError):
            docx_loader.extract_text(path)


class TestXlsxLoader:
    """Test XLSX text extraction."""

    def test_cell_types(self, tmp_path: Path, make_xlsx: Callable[..., Path]) -> None:
        """Shared, formula, inline, numeric and boolean cells resolve to text."""
        path = make_xlsx(
            tmp_path / "book.xlsx",
            sheets=[
                [
                    [("s", "0"), (None, "42"), ("str", "formula out")],
                    [("inlineStr", "inline text"), ("s", "5"), ("b", "1")],
                ],
                [[("s", "1")]],
            ],
            shared=["Alpha", "Beta"],
        )

        text = xlsx_loader.extract_text(path)

        assert text == "Alpha 42 formula out inline text 1 Beta"
        assert_normalized(text)

    def test_without_shared_strings(self, tmp_path: Path, make_xlsx: Callable[..., Path]) -> None:
        """Missing sharedStrings.xml means an empty table, not an error."""
        path = make_xlsx(
            tmp_path / "book.xlsx",
            sheets=[[[("s", "0"), (None, "3.5")]]],
        )

        assert xlsx_loader.extract_text(path) == "3.5"

    def test_non_numeric_shared_index(self, tmp_path: Path, make_xlsx: Callable[..., Path]) -> None:
        path = make_xlsx(
            tmp_path / "book.xlsx",
            sheets=[[[("s", "abc"), (None, "7")]]],
            shared=["never"],
        )

        assert xlsx_loader.extract_text(path) == "7"

    def test_sheet_without_namespace(self, tmp_path: Path) -> None:
        path = write_zip(
            tmp_path / "book.xlsx",
            [("xl/worksheets/sheet1.xml", sheet_part([[("inlineStr", "bare sheet")]], namespace=""))],
        )

        assert xlsx_loader.extract_text(path) == "bare sheet"

    def test_malformed_sheet_is_skipped(self, tmp_path: Path) -> None:
        path = write_zip(
            tmp_path / "book.xlsx",
            [
                ("xl/worksheets/sheet1.xml", "<worksheet><sheetData>"),
                ("xl/worksheets/sheet2.xml", sheet_part([[("inlineStr", "good sheet")]])),
            ],
        )

        assert xlsx_loader.extract_text(path) == "good sheet"

    def test_worksheet_part_names(self) -> None:
        assert xlsx_loader.is_worksheet_part("xl/worksheets/sheet1.xml")
        assert not xlsx_loader.is_worksheet_part("xl/worksheets/_rels/sheet1.xml.rels")
        assert not xlsx_loader.is_worksheet_part("xl/workbook.xml")


class TestDispatch:
    """Test format detection and load_document."""

    def test_detect_format_case_insensitive(self) -> None:
        assert detect_format(Path("REPORT.DOCX")) is DocumentFormat.DOCX
        assert detect_format(Path("a/b/notes.Odt")) is DocumentFormat.ODT
        assert detect_format(Path("book.xlsx")) is DocumentFormat.XLSX

    def test_detect_format_unsupported(self) -> None:
        assert detect_format(Path("notes.txt")) is None
        assert detect_format(Path("backup.odt.bak")) is None
        assert detect_format(Path("legacy.doc")) is None

    def test_supported_suffixes(self) -> None:
        assert SUPPORTED_SUFFIXES == (".odt", ".docx", ".xlsx")

    def test_load_document(self, tmp_path: Path, make_odt: Callable[..., Path]) -> None:
        path = make_odt(tmp_path / "doc.odt", ["Some text"])

        document = load_document(path)

        assert isinstance(document, ExtractedDocument)
        assert document.path == path
        assert document.text == "Some text"

    def test_extract_text_unsupported(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Unsupported"):
            extract_text(tmp_path / "notes.txt")
