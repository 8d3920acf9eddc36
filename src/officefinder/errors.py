"""Exception hierarchy shared by the extraction and search layers."""

from __future__ import annotations

from pathlib import Path


class OfficeFinderError(Exception):
    """Base class for every error raised by OfficeFinder."""


class UsageError(OfficeFinderError):
    """Invalid request made before a search run starts."""


class ContainerError(OfficeFinderError):
    """The ZIP container of a document cannot be read."""


class NotAZipError(ContainerError):
    """File is not a valid ZIP archive."""


class MissingPartError(ContainerError):
    """A requested part is not present in the archive."""

    def __init__(self, part: str) -> None:
        super().__init__(f"Part not found in archive: {part}")
        self.part = part


class EncryptedContainerError(ContainerError):
    """Archive part is password protected; it is skipped, never decrypted."""


class ExtractError(OfficeFinderError):
    """Text extraction of a document failed."""


class NotAContainerError(ExtractError):
    """Document file is not a ZIP container."""


class RequiredPartMissingError(ExtractError):
    def __init__(self, part: str) -> None:
        super().__init__(f"Required part missing: {part}")
        self.part = part


class MalformedXmlError(ExtractError):
    """An XML part could not be parsed or declares a DOCTYPE."""


class TraversalError(OfficeFinderError):
    """A directory or entry could not be accessed during the walk."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot access: {path} ({reason})")
        self.path = path
        self.reason = reason
