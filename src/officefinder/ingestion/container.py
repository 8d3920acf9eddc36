"""Read-only access to ZIP-packaged document containers.

Parts are streamed on demand; nothing is extracted to disk and the archive
is never loaded into memory as a whole.
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import IO, Callable, Iterator, Optional

from officefinder.errors import (
    ContainerError,
    EncryptedContainerError,
    MissingPartError,
    NotAZipError,
)

LOGGER = logging.getLogger(__name__)


class Archive:
    """An open document container."""

    def __init__(self, path: Path, zip_file: zipfile.ZipFile) -> None:
        self.path = path
        self._zip = zip_file

    def __enter__(self) -> "Archive":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._zip.close()

    def has_part(self, name: str) -> bool:
        try:
            self._zip.getinfo(name)
        except KeyError:
            return False
        return True

    def list_parts(self, predicate: Optional[Callable[[str], bool]] = None) -> Iterator[str]:
        """Yield part names in archive order, optionally filtered by ``predicate``."""
        for info in self._zip.infolist():
            if info.is_dir():
                continue
            if predicate is None or predicate(info.filename):
                yield info.filename

    def read_part(self, name: str) -> IO[bytes]:
        """Open a binary stream on a single part."""
        try:
            info = self._zip.getinfo(name)
        except KeyError:
            raise MissingPartError(name) from None
        if info.flag_bits & 0x1:
            raise EncryptedContainerError(f"Encrypted part {name} in {self.path}")
        try:
            return self._zip.open(info)
        except (zipfile.BadZipFile, NotImplementedError, RuntimeError) as exc:
            raise ContainerError(f"Cannot read part {name} in {self.path}: {exc}") from exc


def open_archive(path: Path) -> Archive:
    """Open ``path`` as a ZIP container.

    Raises NotAZipError when the file has no valid central directory
    (zero-byte files included).
    """
    try:
        zip_file = zipfile.ZipFile(path)
    except zipfile.BadZipFile as exc:
        raise NotAZipError(f"Not a ZIP archive: {path} ({exc})") from exc
    LOGGER.debug("Opened container %s", path)
    return Archive(Path(path), zip_file)
