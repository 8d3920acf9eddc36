"""Hardened XML parsing of container parts.

Entities are never resolved, DTDs never loaded and the network never
touched. Parts carrying a DOCTYPE are rejected outright, which closes both
XXE and entity-expansion attacks.
"""

from __future__ import annotations

import zipfile
import zlib
from typing import List, Optional

from lxml import etree

from officefinder.errors import ContainerError, MalformedXmlError
from officefinder.ingestion.container import Archive

SPREADSHEETML_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"


def _make_parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        load_dtd=False,
        dtd_validation=False,
        no_network=True,
        huge_tree=False,
        remove_comments=True,
        remove_pis=True,
    )


def parse_part(archive: Archive, name: str) -> etree._Element:
    """Parse a part and return its document element."""
    with archive.read_part(name) as stream:
        try:
            tree = etree.parse(stream, _make_parser())
        except etree.XMLSyntaxError as exc:
            raise MalformedXmlError(f"Malformed XML in {name}: {exc}") from exc
        except (zipfile.BadZipFile, zlib.error, EOFError) as exc:
            raise ContainerError(f"Corrupt part {name} in {archive.path}: {exc}") from exc

    if tree.docinfo.doctype:
        raise MalformedXmlError(f"DOCTYPE declarations are not allowed in {name}")
    return tree.getroot()


def text_content(element: Optional[etree._Element]) -> str:
    """Concatenate all descendant text nodes in document order."""
    if element is None:
        return ""
    return "".join(element.itertext())


def find_all(
    parent: etree._Element, local_name: str, namespace: Optional[str] = None
) -> List[etree._Element]:
    """Descendants named ``local_name``.

    The namespaced lookup runs first; if it finds nothing, any namespace (or
    none) is accepted.
    """
    if namespace:
        found = list(parent.iterdescendants(f"{{{namespace}}}{local_name}"))
        if found:
            return found
    return list(parent.iterdescendants(f"{{*}}{local_name}"))


def find_first(
    parent: etree._Element, local_name: str, namespace: Optional[str] = None
) -> Optional[etree._Element]:
    found = find_all(parent, local_name, namespace)
    return found[0] if found else None
